"""
Tests for the poll/timeout loop and result materialization.
"""

import math
from contextlib import contextmanager

import pytest

from html2pdf_client import ConversionTimeout, Job, JobFailed, JobStatus, TransportFailure
from html2pdf_client.conversion import JobPoller

DOWNLOAD_URL = "https://files.test/job-1.pdf"
PDF = b"%PDF-1.7 test document"


def _job(status, **extra):
    return {"jobId": "job-1", "status": status, **extra}


class TestPollingTransitions:
    def test_in_progress_then_processing_then_completed(self, client, transport, clock):
        transport.job_responses = [
            _job("in_progress"),
            _job("processing"),
            _job("completed", downloadUrl=DOWNLOAD_URL),
        ]
        transport.downloads[DOWNLOAD_URL] = PDF

        result = client.convert(html="<h1>Test</h1>", poll_interval_ms=500)

        assert result == PDF
        assert isinstance(result, bytes)
        assert transport.count("get_json") == 3
        assert transport.calls[-1] == ("download", DOWNLOAD_URL)
        assert clock.sleeps == [0.5, 0.5]

    def test_status_reads_use_job_path(self, client, transport):
        transport.job_responses = [_job("completed", downloadUrl=DOWNLOAD_URL)]
        transport.downloads[DOWNLOAD_URL] = PDF

        client.get_job("job-1")

        assert ("get_json", "/jobs/job-1") in transport.calls

    def test_completed_without_download_url_keeps_polling(self, client, transport, clock):
        transport.job_responses = [
            _job("completed"),
            _job("completed", downloadUrl=DOWNLOAD_URL),
        ]
        transport.downloads[DOWNLOAD_URL] = PDF

        assert client.get_job("job-1") == PDF
        assert transport.count("get_json") == 2
        assert clock.sleeps == [2.0]

    def test_failed_job_stops_immediately(self, client, transport, clock):
        transport.job_responses = [_job("queued"), _job("failed", errorMessage="Page crashed")]

        with pytest.raises(JobFailed) as exc_info:
            client.get_job("job-1")

        assert str(exc_info.value) == "PDF conversion failed: Page crashed"
        assert exc_info.value.reason == "Page crashed"
        assert transport.count("get_json") == 2
        assert len(clock.sleeps) == 1

    def test_failed_job_without_reason(self, client, transport):
        transport.job_responses = [_job("failed")]

        with pytest.raises(JobFailed, match="PDF conversion failed: Unknown error"):
            client.get_job("job-1")

    def test_get_job_status_reads_once(self, client, transport):
        transport.job_responses = [_job("processing")]

        job = client.get_job_status("job-1")

        assert job == Job(id="job-1", status=JobStatus.PROCESSING)
        assert transport.count("get_json") == 1


    @pytest.mark.parametrize("body", [[1], "ok", None])
    def test_non_object_status_body_keeps_polling(self, client, transport, clock, body):
        transport.job_responses = [body, _job("completed", downloadUrl=DOWNLOAD_URL)]
        transport.downloads[DOWNLOAD_URL] = PDF

        assert client.get_job("job-1") == PDF
        assert transport.count("get_json") == 2
        assert clock.sleeps == [2.0]

    def test_non_object_status_body_until_timeout(self, client, transport):
        transport.job_responses = [[1]]

        with pytest.raises(ConversionTimeout):
            client.get_job("job-1", poll_interval_ms=1000, timeout_ms=3000)


class TestTimeout:
    def test_times_out_with_configured_budget(self, client, transport, clock):
        transport.job_responses = [_job("processing")]

        with pytest.raises(ConversionTimeout) as exc_info:
            client.get_job("job-1", poll_interval_ms=1000, timeout_ms=5000)

        assert str(exc_info.value) == "PDF conversion timed out after 5 seconds waiting for completion"
        assert exc_info.value.timeout_ms == 5000
        assert clock.now * 1000 > 5000

    def test_read_count_is_bounded(self, client, transport):
        transport.job_responses = [_job("queued")]

        with pytest.raises(ConversionTimeout):
            client.get_job("job-1", poll_interval_ms=300, timeout_ms=2000)

        assert transport.count("get_json") <= math.ceil(2000 / 300) + 2

    def test_fractional_seconds_in_message(self, client, transport):
        transport.job_responses = [_job("queued")]

        with pytest.raises(ConversionTimeout, match="timed out after 1.5 seconds"):
            client.get_job("job-1", poll_interval_ms=500, timeout_ms=1500)

    def test_direct_polling_defaults_to_fifteen_minutes(self, transport, clock):
        transport.job_responses = [_job("queued")]
        poller = JobPoller(transport, clock=clock, sleep=clock.sleep)

        with pytest.raises(ConversionTimeout, match="after 900 seconds"):
            poller.run("job-1", poll_interval_ms=60_000)

    def test_convert_uses_five_minute_default(self, client, transport):
        transport.job_responses = [_job("queued")]

        with pytest.raises(ConversionTimeout, match="after 300 seconds"):
            client.convert(url="https://example.com", poll_interval_ms=60_000)


class TestTransportFailures:
    """Failures while polling keep the transport's own message."""

    def test_status_read_failure(self, client, transport, transport_error):
        transport.job_responses = [transport_error("Request failed with status code 404", status=404, remote_message="Not found")]

        with pytest.raises(TransportFailure) as exc_info:
            client.get_job("job-1")

        assert str(exc_info.value) == "Request failed with status code 404"

    def test_download_failure(self, client, transport, transport_error):
        transport.job_responses = [_job("completed", downloadUrl=DOWNLOAD_URL)]
        transport.downloads[DOWNLOAD_URL] = transport_error("socket hang up")

        with pytest.raises(TransportFailure, match="socket hang up"):
            client.get_job("job-1")


class TestMaterialization:
    def test_save_to_streams_into_file(self, client, transport, tmp_path):
        destination = tmp_path / "out.pdf"
        transport.job_responses = [_job("completed", downloadUrl=DOWNLOAD_URL)]
        transport.downloads[DOWNLOAD_URL] = PDF

        result = client.convert(url="https://example.com", save_to=str(destination))

        assert result == str(destination)
        assert destination.read_bytes() == PDF
        assert transport.count("open_stream") == 1
        assert transport.count("download") == 0

    def test_get_job_save_to(self, client, transport, tmp_path):
        destination = tmp_path / "direct.pdf"
        transport.job_responses = [_job("completed", downloadUrl=DOWNLOAD_URL)]
        transport.downloads[DOWNLOAD_URL] = PDF

        assert client.get_job("job-1", save_to=str(destination)) == str(destination)
        assert destination.read_bytes() == PDF

    def test_write_error_propagates(self, client, transport, tmp_path):
        transport.job_responses = [_job("completed", downloadUrl=DOWNLOAD_URL)]
        transport.downloads[DOWNLOAD_URL] = PDF

        with pytest.raises(OSError):
            client.get_job("job-1", save_to=str(tmp_path / "missing-dir" / "out.pdf"))

    def test_materialize_requires_download_url(self, transport):
        with pytest.raises(ValueError):
            JobPoller(transport).materialize(Job(id="job-1", status=JobStatus.COMPLETED))

    def test_broken_stream_leaves_no_partial_file(self, client, transport, transport_error, tmp_path):
        destination = tmp_path / "partial.pdf"
        transport.job_responses = [_job("completed", downloadUrl=DOWNLOAD_URL)]

        @contextmanager
        def broken_stream(url):
            def chunks():
                yield PDF[:5]
                raise transport_error("Connection broken: IncompleteRead")

            yield chunks()

        transport.open_stream = broken_stream

        with pytest.raises(TransportFailure, match="IncompleteRead"):
            client.get_job("job-1", save_to=str(destination))

        assert not destination.exists()
