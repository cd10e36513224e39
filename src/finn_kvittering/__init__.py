"""Finn.no purchase receipts: listing extraction and voucher rendering."""
