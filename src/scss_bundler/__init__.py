"""scss-bundler — incremental SCSS bundling with a shared common stylesheet."""

__version__ = "0.3.0"
