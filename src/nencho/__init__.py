"""Year-end adjustment helpers: taxable income calculator and PDF form editor."""
