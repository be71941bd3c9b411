"""relman: build a Rust crate for many targets, resume failed runs, publish."""

__version__ = "0.4.0"
