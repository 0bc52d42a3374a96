"""Services package: duplicate detection, receipt export, text extraction, storage and stores."""
