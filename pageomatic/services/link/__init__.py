"""Link service module with scanning and reporting components."""

from pageomatic.services.link.reporting import IssueReporter
from pageomatic.services.link.scanning import ReferenceScanner, scan_references

__all__ = ["ReferenceScanner", "IssueReporter", "scan_references"]
