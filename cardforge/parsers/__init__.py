from cardforge.parsers.card_sheet import load_card_sheet, parse_card_sheet, parse_row

__all__ = [
    "load_card_sheet",
    "parse_card_sheet",
    "parse_row",
]
