from pathlib import Path

from streamlit.testing.v1 import AppTest

APP = Path(__file__).resolve().parent.parent / "app.py"


def test_page_renders_before_upload():
    at = AppTest.from_file(str(APP)).run(timeout=30)
    assert not at.exception
    assert at.title[0].value.startswith("Huffman Compression Studio")
    assert [s.value for s in at.subheader] == ["1) Instructions", "2) File Uploader"]
    # nothing to process until a file is uploaded
    assert len(at.button) == 0
