"""StudyHub backend: study-material API and background job worker."""

__version__ = "1.0.0"
