# ========================
# src/rsp_pipeline/tokenizer.py
# ========================

"""
Line Tokenizer

Splits a single CSV line into fields. Double quotes toggle a quoted section
in which commas are kept as data. A doubled quote is not treated as an
escaped literal quote; the bundled RSP export never contains one.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)

DELIMITER = ','
QUOTE = '"'


def tokenize(line: str) -> List[str]:
    """
    Split one raw CSV line into stripped string fields.

    Args:
        line (str): A single line of text without its line terminator

    Returns:
        list[str]: The fields in source column order, or an empty list when
                   the line could not be tokenized.
    """
    try:
        fields = []
        buffer = []
        in_quotes = False

        for char in line:
            if char == QUOTE:
                in_quotes = not in_quotes
            elif char == DELIMITER and not in_quotes:
                fields.append(''.join(buffer).strip())
                buffer = []
            else:
                buffer.append(char)

        fields.append(''.join(buffer).strip())
        return fields

    except Exception as e:
        logger.warning(f"Error tokenizing CSV line: {e}")
        return []
