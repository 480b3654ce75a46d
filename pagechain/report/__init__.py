# File: pagechain/report/__init__.py
"""pagechain.report: сериализация результатов обхода, используемая CLI и тестами."""

from pagechain.report.json_report import build_report, render_json

__all__ = ["build_report", "render_json"]
