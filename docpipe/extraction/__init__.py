from docpipe.extraction.base import BaseExtractor
from docpipe.extraction.extractor import CompanyExtractor
from docpipe.extraction.factory import ExtractorFactory

__all__ = ["BaseExtractor", "CompanyExtractor", "ExtractorFactory"]
