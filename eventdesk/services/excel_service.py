import pandas as pd
import io
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter

BASE_COLUMNS = ["Name", "Email", "Status", "Submitted At"]

def _cell_value(value):
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return ", ".join(f"{k}: {v}" for k, v in value.items())
    return value

def build_rows(submissions, questions):
    """One row per submission; declared questions become columns in their form order.

    Rows are positional since a question label may repeat a base column name.
    """
    rows = []
    for sub in submissions:
        data = sub.get("data") or {}
        submitted = sub.get("created_at")
        row = [
            sub.get("user_name"),
            sub.get("user_email"),
            sub.get("status"),
            submitted.strftime("%Y-%m-%d %H:%M") if submitted else None,
        ]
        row.extend(_cell_value(data.get(question["id"])) for question in questions)
        rows.append(row)
    return rows

def generate_submissions_excel(submissions, questions, title):
    columns = BASE_COLUMNS + [q["label"] for q in questions]
    df = pd.DataFrame(build_rows(submissions, questions), columns=columns)

    output = io.BytesIO()

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, startrow=1, sheet_name='Submissions')
        worksheet = writer.sheets['Submissions']
        worksheet['A1'] = title
        if len(columns) > 1:
            worksheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))

        title_cell = worksheet['A1']
        title_cell.font = Font(size=12, bold=True)
        title_cell.alignment = Alignment(horizontal='center')

        header_font = Font(bold=True)
        for cell in worksheet[2]:
            cell.font = header_font

        for index, column in enumerate(columns, start=1):
            column_letter = get_column_letter(index)
            max_length = len(str(column))
            for cell in worksheet[column_letter][2:]:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))
            worksheet.column_dimensions[column_letter].width = max_length + 2

    output.seek(0)
    return output
