# wsqcodec

Building blocks of the WSQ (Wavelet Scalar Quantization) grayscale image
codec used for fingerprint images.

## Modules

- `wsqcodec.tree` – subband layout of an image.
  - `build_w_tree(width, height)` returns the 20 `WTreeNode` entries
    (position, size and row/column inversion flags) of the wavelet
    decomposition.
  - `build_q_tree(w_tree)` returns the 64 `QTreeNode` entries (position and
    size) of the quantization subbands.
  - `build_wsq_trees(width, height)` returns both as a `(w_tree, q_tree)`
    tuple.
- `wsqcodec.wavelet` – symmetric-extension wavelet filtering with numpy.
  - `wsq_decompose(fdata, width, height, w_tree, hifilt, lofilt)` splits a
    float image into its subbands.
  - `wsq_reconstruct(fdata, width, height, w_tree, hifilt, lofilt)` rebuilds
    the image from its subbands.
  - Both return a new flat `float32` array and leave the input untouched.
    `get_lets` and `join_lets` apply one analysis or synthesis pass over a
    strided set of signals.
  - Missing filter coefficients, mismatched image sizes or signals too short
    for the filters raise `ValueError`.
- `wsqcodec.segments` – byte-level stream handling.
  - `ByteReader` and `ByteWriter` read and write big-endian bytes, shorts
    and ints.
  - The `Marker` enum lists the stream markers. `read_marker` checks a
    marker against a `MarkerContext`.
  - `read_frame_header` / `write_frame_header` handle the SOF segment and
    return a `FrameHeader` when reading.
  - `read_block_header` / `write_block_header` handle SOB segments.
  - `read_comment` / `write_comment` handle COM segments.
  - Malformed or truncated data raises `WsqError`, a subclass of
    `ValueError`.
- `wsqcodec.comments` – comment segments in a complete WSQ byte stream.
  - `add_comment(data, comment)` returns a new stream with the comment
    inserted after any comments that directly follow SOI.
  - `iter_comments(data)` yields every comment before the first SOB.
  - `print_comments(data, out=None)` writes those comments one per line,
    to stdout by default.
  - `delete_comments(data)` returns a copy of the stream, up to and
    including EOI, with all comment segments removed.

## Installation

```
pip install wsqcodec
```

To run the tests:

```
pip install "wsqcodec[test]"
pytest
```

## Example

```python
from wsqcodec.tree import build_wsq_trees
from wsqcodec.comments import add_comment, iter_comments, delete_comments

w_tree, q_tree = build_wsq_trees(64, 48)
print(w_tree[19], q_tree[0])

with open("print.wsq", "rb") as fh:
    data = fh.read()

tagged = add_comment(data, "scanned at station 1")
for text in iter_comments(tagged):
    print(text)

clean = delete_comments(tagged)
```

With analysis filter coefficients `hifilt` and `lofilt` of your choice, and
a float image `fdata` of `width * height` samples:

```python
from wsqcodec.wavelet import wsq_decompose, wsq_reconstruct

subbands = wsq_decompose(fdata, width, height, w_tree, hifilt, lofilt)
image = wsq_reconstruct(subbands, width, height, w_tree, hifilt, lofilt)
```

## What this package does not do

This package does not encode or decode whole WSQ images. It has no
conversion between 8-bit pixels and shifted, scaled floats. It has no
subband variance computation, quantization or unquantization. It does not
read or write the transform, quantization or Huffman table segments, and it
has no Huffman coding of block data. It provides no command-line tool. What
it offers are the trees, the wavelet transform, the marker and header
segments, and the comment editing described above.