import io

import pandas as pd

from smarthr.utils.helpers import full_name


def _to_workbook(df, sheet_name):
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        ws = writer.sheets[sheet_name]
        for column_cells in ws.columns:
            width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column_cells)
            ws.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 50)
    output.seek(0)
    return output


def export_employees_to_excel(employees):
    data = []
    for emp in employees:
        user = emp.get('users') or {}
        data.append({
            'Employee ID': emp['employee_id'],
            'Name': full_name(user),
            'Email': user.get('email') or '-',
            'Phone': user.get('phone') or '-',
            'Department': (emp.get('departments') or {}).get('name') or '-',
            'Designation': (emp.get('designations') or {}).get('name') or '-',
            'Employment Type': emp['employment_type'],
            'Status': emp['status'],
            'Date of Joining': emp['joining_date'] or '-',
            'Salary': emp['salary'] if emp['salary'] is not None else 0.0,
        })
    columns = ['Employee ID', 'Name', 'Email', 'Phone', 'Department', 'Designation',
               'Employment Type', 'Status', 'Date of Joining', 'Salary']
    return _to_workbook(pd.DataFrame(data, columns=columns), 'Employees')


def export_leaves_to_excel(leaves):
    data = []
    summary = {}
    for leave in leaves:
        employee = leave['employees']
        name = full_name(employee['users'])
        data.append({
            'Employee ID': employee['employee_id'],
            'Employee': name,
            'Leave Type': leave['leave_types']['name'],
            'From': leave['start_date'],
            'To': leave['end_date'],
            'Days': leave['days'],
            'Reason': leave['reason'],
            'Status': leave['status'].capitalize(),
            'Approved By': full_name(leave.get('approved_by_user')) or '-',
        })
        if leave['status'] == 'approved':
            summary[name] = summary.get(name, 0) + leave['days']

    leaves_df = pd.DataFrame(data, columns=['Employee ID', 'Employee', 'Leave Type', 'From', 'To', 'Days',
                                            'Reason', 'Status', 'Approved By'])
    summary_df = pd.DataFrame(
        [{'Employee': name, 'Approved Days': days} for name, days in sorted(summary.items())],
        columns=['Employee', 'Approved Days'],
    )

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        leaves_df.to_excel(writer, index=False, sheet_name='Leaves')
        summary_df.to_excel(writer, index=False, sheet_name='Employee Summary')
    output.seek(0)
    return output
