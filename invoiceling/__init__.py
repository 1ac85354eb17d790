"""Invoicing for freelancers: clients and invoices stored as JSON, rendered to PDF."""

__version__ = "0.2.1"