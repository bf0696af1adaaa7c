"""Document parsing and front matter validation components."""

from pageomatic.services.document.parsing import DocumentParser
from pageomatic.services.document.validation import FrontMatterValidator

__all__ = ["DocumentParser", "FrontMatterValidator"]
