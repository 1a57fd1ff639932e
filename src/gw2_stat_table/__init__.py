"""Guild Wars 2 item stat lookup table, scraped from the wiki's template engine."""

from gw2_stat_table.table import TableBuilder, build_skeleton, fetch_table, query_item_attributes

__all__ = ["TableBuilder", "build_skeleton", "fetch_table", "query_item_attributes"]
