"""WSQ image codec components: subband trees, wavelet transforms, stream segments and comments."""

__version__ = "0.1.0"