import json
import os

import streamlit as st

from html2pdf_client import PdfClient, PdfClientError
from html2pdf_client.config import load_settings

POLL_INTERVAL_MS = int(os.getenv("HTML2PDF_UI_POLL_INTERVAL_MS", "2000"))
TIMEOUT_MS = int(os.getenv("HTML2PDF_UI_TIMEOUT_MS", "300000"))

SOURCES = ("HTML", "URL", "Upload HTML file")


def _reset_state():
    for key in ["pdf_bytes", "error"]:
        if key in st.session_state:
            del st.session_state[key]
    # Bump the uploader key to clear any previously uploaded file widget state
    st.session_state["upload_key"] = st.session_state.get("upload_key", 0) + 1


def _parse_options(text: str) -> dict[str, object]:
    """Parse the options box; blank means no options."""
    if not text.strip():
        return {}
    options = json.loads(text)
    if not isinstance(options, dict):
        raise ValueError("PDF options must be a JSON object")
    return options


def _run_conversion(
    client: PdfClient,
    *,
    html: str | None = None,
    url: str | None = None,
    options_text: str = "",
) -> tuple[bytes | None, str | None]:
    """Return (pdf, None) on success or (None, error message)."""
    try:
        options = _parse_options(options_text)
    except ValueError as e:
        return None, f"Invalid PDF options: {e}"
    try:
        pdf = client.convert(
            html=html,
            url=url,
            pdf_options=options,
            poll_interval_ms=POLL_INTERVAL_MS,
            timeout_ms=TIMEOUT_MS,
        )
    except PdfClientError as e:
        return None, str(e)
    return bytes(pdf), None


def main() -> None:
    st.set_page_config(page_title="HTML to PDF", page_icon="📄", layout="centered")
    st.title("📄 HTML to PDF")
    settings = load_settings()
    st.caption(f"API base: {settings.base_url}")

    if st.button("Restart", type="secondary"):
        _reset_state()
        st.rerun()

    if not settings.api_key:
        st.error("Set HTML2PDF_API_KEY to use the converter.")
        return

    if "upload_key" not in st.session_state:
        st.session_state["upload_key"] = 0

    kind = st.radio("Source", SOURCES, horizontal=True)
    html = url = None
    if kind == "HTML":
        html = st.text_area("HTML", height=240, placeholder="<h1>Hello</h1>")
    elif kind == "URL":
        url = st.text_input("URL", placeholder="https://example.com")
    else:
        uploaded = st.file_uploader(
            "Upload an HTML document",
            type=["html", "htm"],
            key=f"uploader-{st.session_state['upload_key']}",
        )
        if uploaded is not None:
            html = uploaded.getvalue().decode("utf-8", errors="replace")

    options_text = st.text_area("PDF options (JSON)", value="", placeholder='{"format": "A4"}')

    if st.button("Convert", type="primary"):
        for key in ("pdf_bytes", "error"):
            st.session_state.pop(key, None)
        client = PdfClient.from_env()
        with st.spinner("Converting..."):
            pdf, error = _run_conversion(client, html=html, url=url, options_text=options_text)
        if error:
            st.session_state["error"] = error
        else:
            st.session_state["pdf_bytes"] = pdf
            st.toast("Conversion complete", icon="✅")

    if "pdf_bytes" in st.session_state:
        st.success("Conversion complete!")
        st.download_button(
            label="Download PDF",
            data=st.session_state["pdf_bytes"],
            file_name="conversion.pdf",
            mime="application/pdf",
        )

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
