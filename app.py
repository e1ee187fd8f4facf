# ----------------
# Importations
# ----------------
import os
import tempfile

import streamlit as st

from huffcodec import Header, HuffConfig, compress_file, decompress_file
from huffreport import summary_frame, timings_frame, tree_to_dot

# ------------------------
#   Streamlit App
# ------------------------
st.set_page_config(page_title="Huffman Compressor", layout="centered")
st.title("Huffman Compression Studio 🗃")

# ---------------------
#    Instructions
# ---------------------
st.subheader("1) Instructions")

st.markdown("""
*How to Use This File Compression Tool*

1. Upload a file using the button below.
2. Choose **Compress** or **Decompress**.
3. When compressing, pick the header mode (tree headers are smaller, count headers are fixed size).
4. Click *Process File* to start.
5. Download your file after processing.
""")
st.divider()

# -------------------
# file Uploading
# -------------------
st.subheader("2) File Uploader")
uploaded_file = st.file_uploader("Upload a file", type=None)
if uploaded_file:
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        tmp.write(uploaded_file.read())
        tmp_path = tmp.name
    st.success(f"Uploaded file: {uploaded_file.name} ({os.path.getsize(tmp_path)} bytes)")

    action = st.radio("**Choose Action**", ["Compress", "Decompress"])
    config = None
    if action == "Compress":
        mode = st.radio("**Header Mode**", [h.value for h in Header], horizontal=True)
        config = HuffConfig(header=Header(mode))

    if st.button("Process File"):
        st.divider()
        out_suffix = ".huff" if action == "Compress" else "_restored"
        out_path = tmp_path + out_suffix
        try:
            with st.spinner(f"{action}ing file..."):
                # ------------------
                #  File Compression
                # ------------------
                if action == "Compress":
                    root, stats = compress_file(tmp_path, out_path, config)

                    st.subheader("3) Compression Summary")
                    col1, col2, col3 = st.columns(3)
                    col1.metric("**Original Size**", f"{stats['original_bytes']} bytes")
                    col2.metric("**Compressed Size**", f"{stats['compressed_bytes']} bytes")
                    space_saved = stats["space_saved_percent"]
                    if space_saved is None:
                        col3.metric("Space Saved", "N/A")
                    else:
                        col3.metric("Space Saved", f"{space_saved:.2f}%")

                    ratio = stats["compression_ratio"]
                    if ratio is None:
                        st.markdown("*Compression ratio: N/A (empty file)*")
                    else:
                        st.markdown(f"*Compression ratio: {ratio:.4f}*")
                    st.table(summary_frame(stats))

                    st.divider()
                    st.subheader("4) Processing Timings")
                    st.table(timings_frame(stats))

                    st.divider()
                    st.subheader("5) Huffman Tree")
                    st.graphviz_chart(tree_to_dot(root))

                # ----------------------
                # File Decompression
                # ---------------------
                else:
                    # the magic number tells which header was written
                    stats = decompress_file(tmp_path, out_path)
                    st.subheader("3) Decompression Report")
                    col1, col2, col3 = st.columns(3)
                    col1.metric("Compressed file size", f"{stats['compressed_size']} bytes")
                    col2.metric("Restored file size", f"{stats['restored_size']} bytes")
                    col3.metric("Header mode", stats["header"])
                    st.divider()
                    st.subheader("4) Processing Timings")
                    st.table(timings_frame(stats))

            if os.path.exists(out_path):
                with open(out_path, 'rb') as f:
                    # ------------------------
                    #   File Downloading
                    # ------------------------
                    st.divider()
                    st.subheader("Download Button")
                    st.info(f" Download your {action.lower()}ed file here.")
                    st.download_button(
                        label=f"{os.path.basename(out_path)}",
                        data=f.read(),
                        file_name=os.path.basename(out_path),
                        mime="application/octet-stream"
                    )
        except ValueError as e:
            # FormatError / StreamTruncatedError from the codec
            st.error(f"Error: {str(e)}")
        except Exception as e:
            st.error(f"Unexpected Error: {str(e)}")
        finally:
            # cleanup
            for path in (tmp_path, out_path):
                if os.path.exists(path):
                    os.remove(path)
