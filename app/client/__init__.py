from .report_form import FormState, ReportForm

__all__ = ["FormState", "ReportForm"]
