"""transcodeplan - ffmpeg command synthesizer and output size estimator."""

__version__ = "0.3.0"
