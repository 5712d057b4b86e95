"""Runtime configuration defaults for persistence, pricing and printing."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("POS_DB_PATH", "data/pos.db")
RECEIPT_EXPORT_DIR = os.environ.get("POS_RECEIPT_DIR", "receipts")
DEBUG_LOG_PATH = os.environ.get("POS_DEBUG_LOG", "/tmp/pos-debug.log")
# Zone used for dates printed on receipts; empty means the host local zone.
RECEIPT_TIMEZONE = os.environ.get("POS_RECEIPT_TIMEZONE", "Asia/Jakarta")

# Percent, applied after discount.
TAX_RATE = 10
CURRENCY_SYMBOL = "Rp"
CURRENCY_DECIMALS = 0
PAYMENT_METHOD_CASH = "cash"

BUSINESS_NAME = "RESTORAN APP"
BUSINESS_ADDRESS = "Jl. Contoh No. 123, Jakarta"
BUSINESS_PHONE = "Telp: (021) 1234567"
RECEIPT_CLOSING_MESSAGE = "Terima kasih atas kunjungan Anda!"

DEFAULT_CASHIER_ID = "cashier-01"
DEFAULT_CASHIER_NAME = "Kasir"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 22
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_TAIL_SPACER_PX = 70
