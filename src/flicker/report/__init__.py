from flicker.report.renderers import build_report, render_markdown, report_paths, write_reports

__all__ = ["build_report", "render_markdown", "report_paths", "write_reports"]
