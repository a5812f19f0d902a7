from __future__ import annotations

import csv
import io
from dataclasses import asdict

from flask import Flask, request

from ..common.http import current_user, login_required, ok
from ..container import Container
from .model import DownloadLog, ReportData
from .service import CSV_FIELDS

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _report_json(data: ReportData) -> dict:
    return {
        "rows": data.rows,
        "byEmployee": data.by_employee,
        "summary": {**asdict(data.summary), "total": data.summary.total},
    }


def _log_json(log: DownloadLog) -> dict:
    return {
        "_id": log.record_id,
        "username": log.username or "N/A",
        "startDate": log.start_date.isoformat(),
        "endDate": log.end_date.isoformat(),
        "downloadedAt": log.downloaded_at.isoformat() if log.downloaded_at else None,
    }


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/reports/dashboard", methods=["GET"], endpoint="dashboard_stats")
    @login_required(container)
    def dashboard_stats():
        return ok(reports.dashboard_stats())

    @app.route("/reports/month", methods=["GET"], endpoint="month_report")
    @login_required(container)
    def month_report():
        month = request.args.get("month")
        return ok(_report_json(reports.month_view(month)), month=month)

    @app.route("/reports/range", methods=["GET"], endpoint="range_report")
    @login_required(container)
    def range_report():
        data = reports.range_view(request.args.get("from"), request.args.get("to"))
        return ok(_report_json(data))

    @app.route("/reports/breakdown", methods=["GET"], endpoint="breakdown_report")
    @login_required(container)
    def breakdown_report():
        pie = reports.breakdown(
            month=request.args.get("month"),
            start=request.args.get("from"),
            end=request.args.get("to"),
        )
        return ok(pie)

    @app.route("/reports/month.csv", methods=["GET"], endpoint="month_report_csv")
    @login_required(container)
    def month_report_csv():
        month = request.args.get("month")
        data = reports.month_view(month)
        return _write_report_csv(data=data, filename=f"overtime_{month}.csv")

    @app.route("/reports/range.csv", methods=["GET"], endpoint="range_report_csv")
    @login_required(container)
    def range_report_csv():
        start_s, end_s = request.args.get("from"), request.args.get("to")
        data = reports.range_view(start_s, end_s)
        return _write_report_csv(data=data, filename=f"overtime_{start_s}_to_{end_s}.csv")

    @app.route("/reports/export.xlsx", methods=["GET"], endpoint="export_excel")
    @login_required(container)
    def export_excel():
        export = reports.export_excel(
            current_user=current_user(container),
            start_s=request.args.get("startDate"),
            end_s=request.args.get("endDate"),
        )
        return app.response_class(
            export.content,
            mimetype=XLSX_MIMETYPE,
            headers={"Content-Disposition": f"attachment; filename={export.filename}"},
        )

    @app.route("/reports/downloads", methods=["GET"], endpoint="download_logs")
    @login_required(container)
    def download_logs():
        return ok([_log_json(log) for log in reports.list_download_logs()])
