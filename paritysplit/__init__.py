"""Split uploaded PDFs into odd-page and even-page documents."""
