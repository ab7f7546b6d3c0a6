"""File exports: the client list CSV and the staff performance workbook.

The client CSV layout is fixed: an unquoted header line, then one line per
client with every text field quoted (embedded quotes doubled), the age as a
bare integer, languages joined with "; " and "\\n" line endings.
parse_client_csv() reads the same layout back.

Text in the CSV is written verbatim so that it parses back unchanged.
Workbook cells go through sanitise_cell() because spreadsheet users open
them directly.
"""
import csv
import io
import logging

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _
from openpyxl import Workbook
from openpyxl.styles import Font

from .csv_utils import sanitise_filename, sanitise_row
from .filters import parse_report_date

logger = logging.getLogger(__name__)

CLIENT_CSV_HEADER = [
    "ID", "Full Name", "Sex", "Date of Birth", "Age", "Ethnicity",
    "Country of Birth", "Languages", "Referral Source", "Referral Date",
]

LANGUAGE_SEPARATOR = "; "

STAFF_KPI_HEADER = [
    "Staff Name", "Email", "Role", "Assigned Locations", "Activity Locations",
    "Total Activities", "Navigation Assistance", "Services Accessed", "Discharges",
    "Clients Served", "Average Per Day", "Appointment Scheduling",
    "Medicare Enrollment", "Care Coordination", "Mental Health Services", "GP Services",
]

DETAILED_ACTIVITY_HEADER = [
    "Date", "Staff Name", "Staff Email", "Location", "Client ID", "Client Name",
    "Navigation Assistance", "Services Accessed", "Is Discharge", "Follow Up Actions",
]


def _iso(value):
    return value.isoformat() if value else ""


def client_export_record(client, as_of):
    """The exported fields of one client, as the values parse_client_csv() returns."""
    return {
        "id": client.pk,
        "full_name": client.full_name,
        "sex": client.sex or "",
        "birth_date": client.birth_date,
        "age": client.age_on(as_of),
        "ethnicity": client.ethnicity or "",
        "country_of_birth": client.country_of_birth or "",
        "languages": list(client.languages or ()),
        "referral_source": client.referral_source or "",
        "referral_date": client.referral_date,
    }


def export_clients_csv(clients, as_of):
    """Render clients as CSV text. Ages are computed at as_of."""
    buffer = io.StringIO()
    buffer.write(",".join(CLIENT_CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for client in clients:
        record = client_export_record(client, as_of)
        writer.writerow([
            record["id"],
            record["full_name"],
            record["sex"],
            _iso(record["birth_date"]),
            record["age"] if record["age"] is not None else "",
            record["ethnicity"],
            record["country_of_birth"],
            LANGUAGE_SEPARATOR.join(record["languages"]),
            record["referral_source"],
            _iso(record["referral_date"]),
        ])
    return buffer.getvalue()


def parse_client_csv(text):
    """Parse export_clients_csv() output back into client records.

    Raises ValidationError when the header or a row does not fit the layout.
    """
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header != CLIENT_CSV_HEADER:
        raise ValidationError(_("Unrecognised client CSV header."), code="invalid_header")

    records = []
    for line_number, row in enumerate(reader, start=2):
        if not row:
            continue
        if len(row) != len(CLIENT_CSV_HEADER):
            raise ValidationError(
                _("Line %(line)s has %(found)s fields, expected %(expected)s."),
                code="invalid_row",
                params={"line": line_number, "found": len(row), "expected": len(CLIENT_CSV_HEADER)},
            )
        (client_id, full_name, sex, birth_date, age, ethnicity,
         country_of_birth, languages, referral_source, referral_date) = row
        try:
            parsed_age = int(age) if age else None
        except ValueError:
            raise ValidationError(
                _("Line %(line)s has an invalid age."), code="invalid_age", params={"line": line_number},
            ) from None
        records.append({
            "id": client_id,
            "full_name": full_name,
            "sex": sex,
            "birth_date": parse_report_date(birth_date),
            "age": parsed_age,
            "ethnicity": ethnicity,
            "country_of_birth": country_of_birth,
            "languages": languages.split(LANGUAGE_SEPARATOR) if languages else [],
            "referral_source": referral_source,
            "referral_date": parse_report_date(referral_date),
        })
    return records


def client_csv_filename(as_of):
    return sanitise_filename(f"clients_{as_of.isoformat()}.csv")


# ------------------------------------------------------------------
# Staff performance workbook
# ------------------------------------------------------------------

def _append_header(sheet, header):
    sheet.append(header)
    for cell in sheet[1]:
        cell.font = Font(bold=True)


def staff_kpi_rows(staff_rows):
    for row in staff_rows:
        yield [
            row["full_name"],
            row["email"],
            (row["role"] or "").upper(),
            ", ".join(row["assigned_locations"]) or "Not specified",
            ", ".join(row["activity_locations"]) or "No activities",
            row["total_activities"],
            row["navigation_items"],
            row["service_items"],
            row["discharges"],
            row["clients_served"],
            round(row["average_per_day"], 1),
            row["appointment_scheduling"],
            row["medicare_enrollment"],
            row["care_coordination"],
            row["mental_health_services"],
            row["gp_services"],
        ]


def detailed_activity_rows(activity_rows):
    for row in activity_rows:
        yield [
            row["date"],
            row["staff_name"],
            row["staff_email"],
            row["location"],
            row["client_id"],
            row["client_name"],
            ", ".join(row["navigation_assistance"]),
            ", ".join(row["services_accessed"]),
            "Yes" if row["is_discharge"] else "No",
            row["follow_up_actions"],
        ]


def build_staff_performance_workbook(report):
    """Render build_staff_performance() output as .xlsx bytes."""
    workbook = Workbook()
    summary = workbook.active
    summary.title = "Staff KPI Summary"
    _append_header(summary, STAFF_KPI_HEADER)
    for values in staff_kpi_rows(report["staff"]):
        summary.append(sanitise_row(values))

    detail = workbook.create_sheet("Detailed Activities")
    _append_header(detail, DETAILED_ACTIVITY_HEADER)
    for values in detailed_activity_rows(report["activities"]):
        detail.append(sanitise_row(values))

    output = io.BytesIO()
    workbook.save(output)
    logger.info(
        "Built staff performance workbook (%d staff, %d activities)",
        len(report["staff"]), len(report["activities"]),
    )
    return output.getvalue()


def staff_performance_filename(date_from, date_to):
    return sanitise_filename(
        f"Staff_Performance_Report_{_iso(date_from)}_to_{_iso(date_to)}.xlsx"
    )
