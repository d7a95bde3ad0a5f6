from flask import Flask, request, jsonify, send_file, session
from pathlib import Path
from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from datetime import datetime, date
from decimal import Decimal
import logging
import sys

sys.path.insert(0, str(Path(__file__).parent / 'src'))

from pydantic import ValidationError
from werkzeug.exceptions import BadRequest, RequestEntityTooLarge

from api.client import BackendClient, BackendError, SessionExpiredError
from api.auth import AuthService
from api.employees import EmployeeService
from api.attendance import AttendanceService, SelfService
from api.salary import SalaryService, SalaryCodeService
from api.organization import SiteService, DeductionService, UserService
from api.payroll import PayrollService, FormsService
from access import default_route, navigation_for, permissions_for, login_required, permission_required, roles_required
from database.db import init_db, SessionLocal
from database.repository import ArchiveRepository
from models.employee import (
    BLOOD_GROUPS, DEPARTMENTS, DOCUMENT_FIELDS, EMPLOYMENT_TYPES, GENDERS, MARITAL_STATUSES, QUALIFICATIONS,
    SKILL_LEVELS, Employee,
)
from models.attendance import ATTENDANCE_STATUSES, MARKABLE_STATUSES
from models.organization import RANKS, STATES
from models.payroll import ADJUSTABLE_COMPONENTS, SalaryCalculation
from models.user import ADMIN_ROLES, ROLES
from processors.importers import ImportParseError, SalaryCodeImporter, SiteImporter, EmployeeImportPreview
from processors.templates import TemplateBuilder
from processors.exports import (
    DocumentWriter, bonus_csv, form_b_csv, form_b_csv_filename, salary_workbook,
    salary_workbook_filename, site_salary_csv, site_salary_filename,
)
from processors.summaries import attendance_band, monthly_salary_stats, site_report_totals
from schemas import (
    EmployeeRegistration, SalaryCodeForm, AttendanceMark, AttendanceUpdate, BulkAttendance,
    DeductionForm, UserForm, SiteForm, PayrollSelection, SelectionError, SalaryPeriod, BonusFilters,
    ComplianceFilters,
)
from utils.formatters import current_month_year, form_filename, format_date_iso, month_bounds
from utils.validators import EXCEL_EXTENSIONS, validate_upload
from config.settings import (
    BACKEND_API_URL, DEBUG, LOG_FORMAT, LOG_LEVEL, MAX_REQUEST_BYTES, MAX_UPLOAD_BYTES, OUTPUT_DIR,
    SECRET_KEY, ensure_directories,
)

logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = SECRET_KEY
app.config['DEBUG'] = DEBUG
app.config['MAX_CONTENT_LENGTH'] = MAX_REQUEST_BYTES
app.config['BACKEND_API_URL'] = BACKEND_API_URL
app.config['OUTPUT_DIR'] = OUTPUT_DIR
app.config['DB_SESSION_FACTORY'] = SessionLocal
app.config['HTTP_SESSION'] = None  # shared requests.Session, replaced in tests

ensure_directories()
init_db()

STAFF_ROLES = ADMIN_ROLES + ['supervisor']

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
CSV_MIMETYPE = 'text/csv'
PDF_MIMETYPE = 'application/pdf'


# ============================================================================
# Helpers
# ============================================================================

def backend() -> BackendClient:
    """Backend client carrying the logged-in user's token"""
    return BackendClient(
        base_url=app.config['BACKEND_API_URL'],
        token=session.get('token'),
        session=app.config['HTTP_SESSION'],
    )


@contextmanager
def archive():
    db = app.config['DB_SESSION_FACTORY']()
    try:
        yield ArchiveRepository(db)
    finally:
        db.close()


def to_json(value):
    """Dataclasses to dicts and Decimals to floats, recursively"""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Decimal):
        return float(value)
    return value


def ok(data=None, message=None, **extra):
    body = {'success': True}
    if data is not None:
        body['data'] = to_json(data)
    if message:
        body['message'] = message
    body.update({k: to_json(v) for k, v in extra.items()})
    return jsonify(body)


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def current_user() -> dict:
    return session.get('user') or {}


def user_label() -> str:
    user = current_user()
    return user.get('email') or user.get('name') or user.get('id') or 'unknown'


def int_arg(name: str, default=None):
    value = request.args.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"Invalid value for {name}: {value}")


def period_args():
    """year/month query parameters, defaulting to the current month"""
    now = current_month_year()
    return int_arg('year', now['year']), int_arg('month', now['month'])


def uploaded(field: str, extensions=EXCEL_EXTENSIONS, required: bool = True):
    """Return (filename, content) of an uploaded file after extension and size checks"""
    upload = request.files.get(field)
    if not upload or not upload.filename:
        if required:
            raise BadRequest('Please select a file to upload')
        return None
    content = upload.read()
    valid, message = validate_upload(upload.filename, len(content), extensions)
    if not valid:
        raise BadRequest(message)
    return upload.filename, content


def file_tuple(filename: str, content: bytes, mimetype: str = XLSX_MIMETYPE):
    return (filename, content, mimetype)


def send_document(kind: str, filename: str, content, mimetype: str, year=None, month=None, site=None):
    """Write a document under OUTPUT_DIR/<kind>, archive it and send it as an attachment"""
    writer = DocumentWriter(app.config['OUTPUT_DIR'])
    path = writer.save(kind, filename, content)
    with archive() as repo:
        repo.record_document(kind, path, created_by=user_label(), year=year, month=month, site=site)
    return send_file(path, as_attachment=True, download_name=path.name, mimetype=mimetype)


def template_document(kind: str):
    """Locally built bulk-import template"""
    builder = TemplateBuilder(app.config['OUTPUT_DIR'] / 'templates')
    return send_document('templates', builder.filename(kind), builder.build(kind), XLSX_MIMETYPE)


# ============================================================================
# Error handling
# ============================================================================

@app.errorhandler(SessionExpiredError)
def handle_session_expired(e):
    logger.info("Backend rejected the session token, logging out")
    session.clear()
    return jsonify({'success': False, 'message': e.message, 'redirect': '/login'}), 401


@app.errorhandler(BackendError)
def handle_backend_error(e):
    status = e.status_code if e.status_code and 400 <= e.status_code < 500 else 502
    return jsonify({'success': False, 'message': e.message}), status


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    errors = [
        {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
        for err in e.errors()
    ]
    message = errors[0]['message'] if errors else 'Invalid input'
    if message.startswith('Value error, '):
        message = message[len('Value error, '):]
    return jsonify({'success': False, 'message': message, 'errors': errors}), 400


@app.errorhandler(ImportParseError)
@app.errorhandler(SelectionError)
def handle_bad_input(e):
    return jsonify({'success': False, 'message': str(e)}), 400


@app.errorhandler(BadRequest)
def handle_bad_request(e):
    return jsonify({'success': False, 'message': e.description}), 400


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(e):
    limit = MAX_UPLOAD_BYTES // (1024 * 1024)
    return jsonify({'success': False, 'message': f'File size should be less than {limit}MB'}), 413


# ============================================================================
# Auth
# ============================================================================

@app.route('/api/login', methods=['POST'])
def login():
    """Log in against the backend and keep the token in the session"""
    data = json_body()
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    if not email or not password:
        return jsonify({'success': False, 'message': 'Email and password are required'}), 400

    client = backend()
    try:
        user, token = AuthService(client).login(email, password)
    except SessionExpiredError as e:
        # 401 from /auth/login means bad credentials, not an expired session
        return jsonify({'success': False, 'message': e.message}), 401

    session.clear()
    session['token'] = token
    session['user'] = user.to_dict()
    session['last_login'] = datetime.now().isoformat(timespec='seconds')
    return ok(
        user.to_dict(),
        message='Login successful',
        redirect=default_route(user.role),
        permissions=permissions_for(user.role),
    )


@app.route('/api/logout', methods=['POST'])
@login_required
def logout():
    try:
        AuthService(backend()).logout()
    except BackendError as e:
        logger.warning("Backend logout failed: %s", e.message)
    session.clear()
    return ok(message='Logged out', redirect='/login')


@app.route('/api/me')
@login_required
def me():
    """Session user; ?refresh=1 reloads it from the backend"""
    if request.args.get('refresh'):
        user = AuthService(backend()).current_user()
        session['user'] = user.to_dict()
    return ok(current_user(), last_login=session.get('last_login'))


@app.route('/api/token/refresh', methods=['POST'])
@login_required
def refresh_token():
    session['token'] = AuthService(backend()).refresh()
    return ok(message='Token refreshed')


@app.route('/api/navigation')
@login_required
def navigation():
    role = current_user().get('role')
    return ok({
        'home': default_route(role),
        'sections': navigation_for(role),
        'permissions': permissions_for(role),
    })


@app.route('/api/options')
@login_required
def form_options():
    """Fixed choice lists used by the console forms"""
    return ok({
        'roles': ROLES,
        'departments': DEPARTMENTS,
        'employment_types': EMPLOYMENT_TYPES,
        'genders': GENDERS,
        'marital_statuses': MARITAL_STATUSES,
        'blood_groups': BLOOD_GROUPS,
        'qualifications': QUALIFICATIONS,
        'skill_levels': SKILL_LEVELS,
        'document_fields': DOCUMENT_FIELDS,
        'attendance_statuses': ATTENDANCE_STATUSES,
        'markable_statuses': MARKABLE_STATUSES,
        'states': STATES,
        'ranks': RANKS,
        'adjustable_components': ADJUSTABLE_COMPONENTS,
    })


@app.route('/api/dashboard/stats')
@roles_required(*ADMIN_ROLES)
def dashboard_stats():
    client = backend()
    employees = EmployeeService(client).list()
    today = AttendanceService(client).today()
    statuses = {}
    for record in today:
        statuses[record.attendance_status] = statuses.get(record.attendance_status, 0) + 1
    return ok({
        'total_employees': len(employees),
        'marked_today': len(today),
        'today_by_status': statuses,
    })


# ============================================================================
# Employees
# ============================================================================

@app.route('/api/employees')
@roles_required(*STAFF_ROLES)
def list_employees():
    service = EmployeeService(backend())
    query = request.args.get('q', '').strip()
    if query:
        return ok(service.search(query))
    return ok(service.list())


@app.route('/api/employees/site')
@roles_required('supervisor')
def site_employees():
    return ok(EmployeeService(backend()).site_employees())


@app.route('/api/employees/<employee_id>')
@roles_required(*STAFF_ROLES)
def get_employee(employee_id):
    return ok(EmployeeService(backend()).get(employee_id))


@app.route('/api/employees', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('create_employees')
def create_employee():
    return ok(EmployeeService(backend()).create(json_body()), message='Employee created')


@app.route('/api/employees/<employee_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
@permission_required('edit_employees')
def update_employee(employee_id):
    return ok(EmployeeService(backend()).update(employee_id, json_body()), message='Employee updated')


@app.route('/api/employees/<employee_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
@permission_required('delete_employees')
def delete_employee(employee_id):
    EmployeeService(backend()).delete(employee_id)
    return ok(message='Employee deleted')


@app.route('/api/employees/register', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('create_employees')
def register_employee():
    """Multipart registration form plus optional scanned documents"""
    form = EmployeeRegistration(**request.form.to_dict())
    documents = {}
    for name in DOCUMENT_FIELDS:
        upload = request.files.get(name)
        if upload and upload.filename:
            documents[name] = (upload.filename, upload.read(), upload.mimetype)
    employee = EmployeeService(backend()).register(form.to_backend_form(), documents)
    return ok(employee, message='Employee registered successfully')


@app.route('/api/employees/import/preview', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('create_employees')
def preview_employee_import():
    _, content = uploaded('file')
    result = EmployeeImportPreview().parse(content)
    return ok({k: v for k, v in result.items() if k != 'records'})


@app.route('/api/employees/import', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('create_employees')
def import_employees():
    filename, content = uploaded('file')
    parsed = EmployeeImportPreview().parse(content)
    imported = EmployeeService(backend()).bulk_import(parsed['records'])
    with archive() as repo:
        repo.record_import('employees', filename, parsed['total'], [],
                           created=len(imported), failed=parsed['total'] - len(imported),
                           created_by=user_label())
    return ok(imported, message=f"Imported {len(imported)} of {parsed['total']} employees")


@app.route('/api/employees/template')
@roles_required(*ADMIN_ROLES)
def employee_template():
    return template_document('employees')


@app.route('/api/employees/<employee_id>/debug')
@roles_required(*ADMIN_ROLES)
def debug_employee(employee_id):
    return ok(EmployeeService(backend()).debug(employee_id))


@app.route('/api/employees/<employee_id>/skill-level', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
@permission_required('edit_employees')
def fix_skill_level(employee_id):
    skill_level = json_body().get('skill_level')
    if skill_level not in SKILL_LEVELS:
        return jsonify({'success': False, 'message': 'Please select a skill category'}), 400
    employee = EmployeeService(backend()).fix_skill_level(employee_id, skill_level)
    return ok(employee, message=f'Skill level updated to {skill_level}')


# ============================================================================
# Attendance
# ============================================================================

@app.route('/api/attendance/mark', methods=['POST'])
@roles_required(*STAFF_ROLES)
def mark_attendance():
    form = AttendanceMark(**json_body())
    payload = form.model_dump(exclude_none=True)
    payload.setdefault('marked_by', current_user().get('id'))
    return ok(AttendanceService(backend()).mark(payload), message='Attendance marked')


@app.route('/api/attendance/bulk-mark', methods=['POST'])
@roles_required(*STAFF_ROLES)
def bulk_mark_attendance():
    form = BulkAttendance(**json_body())
    records = [record.model_dump(exclude_none=True) for record in form.attendance_records]
    result = AttendanceService(backend()).bulk_mark(records, form.marked_by or current_user().get('id'))
    with archive() as repo:
        failed = result['total_count'] - result['successful_count']
        repo.record_import('attendance', None, len(records), [], created=result['successful_count'],
                           failed=failed, created_by=user_label())
    return ok(result, message=f"Marked {result['successful_count']} of {result['total_count']} records")


@app.route('/api/attendance/today')
@roles_required(*STAFF_ROLES)
def attendance_today():
    return ok(AttendanceService(backend()).today())


@app.route('/api/attendance/date/<day>')
@roles_required(*STAFF_ROLES)
def attendance_by_date(day):
    return ok(AttendanceService(backend()).by_date(day))


@app.route('/api/attendance/employee/<employee_id>')
@roles_required(*STAFF_ROLES)
def attendance_for_employee(employee_id):
    records = AttendanceService(backend()).for_employee(
        employee_id, request.args.get('start_date'), request.args.get('end_date'))
    return ok(records)


@app.route('/api/attendance/monthly-summary/<employee_id>')
@roles_required(*STAFF_ROLES)
def attendance_monthly_summary(employee_id):
    year, month = period_args()
    summary = AttendanceService(backend()).monthly_summary(employee_id, year, month)
    return ok(summary, band=attendance_band(summary.attendance_percentage))


@app.route('/api/attendance/monthly-view')
@roles_required(*STAFF_ROLES)
def attendance_monthly_view():
    """One employee's month keyed by date"""
    employee_id = request.args.get('employee_id')
    if not employee_id:
        return jsonify({'success': False, 'message': 'Please select an employee'}), 400
    year, month = period_args()
    start, end = month_bounds(year, month)
    records = AttendanceService(backend()).for_employee(employee_id, format_date_iso(start), format_date_iso(end))
    days = {record.attendance_date: record for record in records}
    return ok({'year': year, 'month': month, 'days': days})


@app.route('/api/attendance/<attendance_id>', methods=['PUT'])
@roles_required(*STAFF_ROLES)
def update_attendance(attendance_id):
    form = AttendanceUpdate(**json_body())
    record = AttendanceService(backend()).update(attendance_id, form.model_dump(exclude_none=True))
    return ok(record, message='Attendance updated')


@app.route('/api/attendance/site-employees')
@roles_required('supervisor')
def attendance_site_employees():
    return ok(AttendanceService(backend()).site_employees())


@app.route('/api/attendance/site-attendance')
@roles_required('supervisor')
def attendance_site_records():
    records = AttendanceService(backend()).site_attendance(
        request.args.get('start_date'), request.args.get('end_date'),
        request.args.get('employee_id'), request.args.get('site_id'))
    return ok(records)


# ============================================================================
# Employee self service
# ============================================================================

@app.route('/api/self/profile')
@roles_required('employee')
def self_profile():
    return ok(SelfService(backend()).profile())


@app.route('/api/self/attendance', methods=['POST'])
@roles_required('employee')
def self_mark_attendance():
    return ok(SelfService(backend()).mark_attendance(json_body()), message='Attendance marked')


@app.route('/api/self/attendance/today')
@roles_required('employee')
def self_today_attendance():
    record = SelfService(backend()).today_attendance()
    return jsonify({'success': True, 'data': to_json(record), 'marked': record is not None})


@app.route('/api/self/attendance/history')
@roles_required('employee')
def self_attendance_history():
    history = SelfService(backend()).attendance_history(
        int_arg('page', 1), int_arg('per_page', 15), int_arg('month'), int_arg('year'))
    return ok(history['records'], pagination=history['pagination'])


@app.route('/api/self/attendance/summary')
@roles_required('employee')
def self_attendance_summary():
    return ok(SelfService(backend()).attendance_summary())


@app.route('/api/self/salary')
@roles_required('employee')
def self_salary():
    year, month = period_args()
    return ok(SelfService(backend()).current_salary(month, year))


@app.route('/api/self/dashboard')
@roles_required('employee')
def self_dashboard():
    return ok(SelfService(backend()).dashboard_stats())


# ============================================================================
# Salary
# ============================================================================

def salary_response(rows, message):
    return ok([row.to_api() for row in rows], message=message, stats=monthly_salary_stats(rows))


@app.route('/api/salary/upload', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('calculate_salary')
def salary_upload():
    """Attendance sheet (required) and adjustments sheet (optional)"""
    attendance_name, attendance_content = uploaded('attendance')
    adjustments = uploaded('adjustments', required=False)
    rows = SalaryService(backend()).upload_for_calculation(
        file_tuple(attendance_name, attendance_content),
        file_tuple(*adjustments) if adjustments else None,
    )
    return salary_response(rows, f'Salary calculated for {len(rows)} employees')


@app.route('/api/salary/monthly', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('calculate_salary')
def salary_monthly():
    data = json_body()
    if not data.get('year') or not data.get('month'):
        return jsonify({'success': False, 'message': 'Please select both year and month'}), 400
    period = SalaryPeriod(year=data['year'], month=data['month'])
    rows = SalaryService(backend()).calculate_monthly(period.year, period.month, data.get('site_id'))
    return salary_response(rows, f'Salary calculated for {len(rows)} employees')


@app.route('/api/salary/individual', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('calculate_salary')
def salary_individual():
    data = json_body()
    if not data.get('employee_id') or not data.get('year') or not data.get('month'):
        return jsonify({'success': False, 'message': 'Please select employee, year and month'}), 400
    period = SalaryPeriod(year=data['year'], month=data['month'])
    row = SalaryService(backend()).calculate_individual(
        str(data['employee_id']), period.year, period.month, data.get('adjustments'))
    return ok(row.to_api())


@app.route('/api/salary/template/<kind>')
@roles_required(*ADMIN_ROLES)
def salary_template(kind):
    service = SalaryService(backend())
    if kind == 'attendance':
        content = service.attendance_template()
    elif kind == 'adjustments':
        content = service.adjustments_template()
    else:
        return jsonify({'success': False, 'message': 'Unknown template'}), 404
    return send_document('templates', f'{kind}_template.xlsx', content, XLSX_MIMETYPE)


@app.route('/api/salary/export', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('calculate_salary')
def salary_export():
    """Excel export via the backend, or built locally with format=local"""
    data = json_body()
    rows = [SalaryCalculation.from_api(row) for row in data.get('rows') or []]
    if not rows:
        return jsonify({'success': False, 'message': 'No salary data to export'}), 400
    now = current_month_year()
    period = SalaryPeriod(year=data.get('year') or now['year'], month=data.get('month') or now['month'])
    year, month = period.year, period.month
    if data.get('format') == 'local':
        content = salary_workbook(rows, year, month)
    else:
        content = SalaryService(backend()).export(rows)
    return send_document('salary', salary_workbook_filename(year, month), content, XLSX_MIMETYPE,
                         year=year, month=month)


# ============================================================================
# Salary codes
# ============================================================================

@app.route('/api/salary-codes')
@roles_required(*STAFF_ROLES)
def list_salary_codes():
    return ok(SalaryCodeService(backend()).list())


@app.route('/api/salary-codes/template')
@roles_required(*ADMIN_ROLES)
def salary_code_template():
    return template_document('salary_codes')


@app.route('/api/salary-codes/<salary_code>')
@roles_required(*STAFF_ROLES)
def get_salary_code(salary_code):
    return ok(SalaryCodeService(backend()).get(salary_code))


@app.route('/api/salary-codes', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('manage_salary_codes')
def create_salary_code():
    form = SalaryCodeForm(**json_body())
    code = SalaryCodeService(backend()).create(form.to_payload(created_by=user_label()))
    return ok(code, message='Salary code created successfully')


@app.route('/api/salary-codes/import', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('manage_salary_codes')
def import_salary_codes():
    """Parse the sheet locally; ?preview=1 stops before sending"""
    filename, content = uploaded('file')
    parsed = SalaryCodeImporter().parse(content)
    if request.args.get('preview') or not parsed.rows:
        status = 200 if parsed.rows or not parsed.errors else 400
        body = {'success': status == 200, 'data': parsed.to_dict()}
        if status != 200:
            body['message'] = 'No valid rows to import'
        return jsonify(body), status

    rows = [dict(row, created_by=user_label()) for row in parsed.rows]
    result = SalaryCodeService(backend()).bulk_create(rows)
    errors = parsed.errors + [str(e) for e in result['errors']]
    with archive() as repo:
        repo.record_import('salary_codes', filename, parsed.total_rows, errors,
                           created=result['created_count'],
                           failed=result['error_count'] + len(parsed.errors),
                           created_by=user_label())
    return ok(result, message=f"Imported {result['created_count']} salary codes", parse_errors=parsed.errors)


# ============================================================================
# Deductions
# ============================================================================

@app.route('/api/deductions')
@roles_required(*ADMIN_ROLES)
def list_deductions():
    return ok(DeductionService(backend()).list())


@app.route('/api/deductions', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_deduction():
    form = DeductionForm(**json_body())
    deduction = DeductionService(backend()).create(form.model_dump())
    return ok(deduction, message='Deduction created', monthly_installment=form.monthly_installment)


@app.route('/api/deductions/<deduction_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
def update_deduction(deduction_id):
    form = DeductionForm(**json_body())
    DeductionService(backend()).update(deduction_id, form.model_dump())
    return ok(message='Deduction updated', monthly_installment=form.monthly_installment)


@app.route('/api/deductions/<deduction_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_deduction(deduction_id):
    DeductionService(backend()).delete(deduction_id)
    return ok(message='Deduction deleted')


@app.route('/api/deductions/employee/<employee_id>')
@roles_required(*ADMIN_ROLES)
def employee_deductions(employee_id):
    return ok(DeductionService(backend()).for_employee(employee_id))


@app.route('/api/deductions/bulk', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def bulk_upload_deductions():
    filename, content = uploaded('file')
    result = DeductionService(backend()).bulk_upload(file_tuple(filename, content))
    with archive() as repo:
        repo.record_import('deductions', filename, result['success_count'] + result['error_count'],
                           result['errors'], created=result['success_count'], failed=result['error_count'],
                           created_by=user_label())
    return ok(result, message=f"Uploaded {result['success_count']} deductions")


@app.route('/api/deductions/template')
@roles_required(*ADMIN_ROLES)
def deduction_template():
    return send_document('templates', 'deductions_template.xlsx',
                         DeductionService(backend()).template(), XLSX_MIMETYPE)


# ============================================================================
# Sites
# ============================================================================

@app.route('/api/sites')
@roles_required(*ADMIN_ROLES)
def list_sites():
    sites, pagination = SiteService(backend()).list(
        int_arg('page', 1), int_arg('per_page', 10), request.args.get('search', ''))
    return ok(sites, pagination=pagination)


@app.route('/api/sites', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_site():
    form = SiteForm(**json_body())
    return ok(SiteService(backend()).create(form.model_dump(exclude_none=True)), message='Site created')


@app.route('/api/sites/<site_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
def update_site(site_id):
    form = SiteForm(**json_body())
    return ok(SiteService(backend()).update(site_id, form.model_dump(exclude_none=True)), message='Site updated')


@app.route('/api/sites/<site_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_site(site_id):
    SiteService(backend()).delete(site_id)
    return ok(message='Site deleted')


@app.route('/api/sites/import', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def import_sites():
    """Validate locally (Excel or CSV), then forward the file to /sites/bulk"""
    filename, content = uploaded('file', extensions=EXCEL_EXTENSIONS + ('.csv',))
    parsed = SiteImporter().parse(content, filename)
    if request.args.get('preview') or not parsed.rows:
        status = 200 if parsed.rows or not parsed.errors else 400
        body = {'success': status == 200, 'data': parsed.to_dict()}
        if status != 200:
            body['message'] = 'No valid rows to import'
        return jsonify(body), status

    mimetype = CSV_MIMETYPE if filename.lower().endswith('.csv') else XLSX_MIMETYPE
    result = SiteService(backend()).bulk_import(file_tuple(filename, content, mimetype))
    with archive() as repo:
        repo.record_import('sites', filename, parsed.total_rows, parsed.errors + [str(e) for e in result['errors']],
                           created=result['created'], failed=len(result['errors']) + len(parsed.errors),
                           created_by=user_label())
    return ok(result, message=f"Imported {result['created']} sites", parse_errors=parsed.errors)


@app.route('/api/sites/template')
@roles_required(*ADMIN_ROLES)
def site_template():
    return template_document('sites')


# ============================================================================
# Users
# ============================================================================

@app.route('/api/users')
@roles_required(*ADMIN_ROLES)
@permission_required('manage_users')
def list_users():
    return ok(UserService(backend()).list())


@app.route('/api/users', methods=['POST'])
@roles_required(*ADMIN_ROLES)
@permission_required('manage_users')
def create_user():
    form = UserForm(**json_body())
    try:
        payload = form.to_payload(creating=True)
    except ValueError as e:
        return jsonify({'success': False, 'message': str(e)}), 400
    return ok(UserService(backend()).create(payload), message='User created')


@app.route('/api/users/<user_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
@permission_required('manage_users')
def update_user(user_id):
    form = UserForm(**json_body())
    return ok(UserService(backend()).update(user_id, form.to_payload(creating=False)), message='User updated')


@app.route('/api/users/<user_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
@permission_required('manage_users')
def delete_user(user_id):
    UserService(backend()).delete(user_id)
    return ok(message='User deleted')


# ============================================================================
# Payroll
# ============================================================================

@app.route('/api/payroll/employees')
@roles_required(*STAFF_ROLES)
def payroll_employees():
    return ok(PayrollService(backend()).employees(request.args.get('site_id')))


@app.route('/api/payroll/sites')
@roles_required(*STAFF_ROLES)
def payroll_sites():
    return ok(PayrollService(backend()).sites())


def _selection_employees(service: PayrollService, selection: PayrollSelection):
    # Only range mode needs the employee list to resolve ids
    if selection.mode != 'range':
        return []
    return service.employees(selection.site_id)


@app.route('/api/payroll/preview', methods=['POST'])
@roles_required(*STAFF_ROLES)
def payroll_preview():
    selection = PayrollSelection(**json_body())
    service = PayrollService(backend())
    selected = selection.validate_selection(_selection_employees(service, selection))
    preview = service.preview(selected, selection.year, selection.month)
    return ok(preview, message=f"Preview generated for {preview['preview_count']} of "
                               f"{preview['total_employees']} employees")


@app.route('/api/payroll/generate', methods=['POST'])
@roles_required(*STAFF_ROLES)
def payroll_generate():
    """Generate the payslip PDF, archive it and send it"""
    selection = PayrollSelection(**json_body())
    service = PayrollService(backend())
    generation = selection.generation_request(_selection_employees(service, selection))
    content = service.generate(generation)
    return send_document('payroll', generation['filename'], content, PDF_MIMETYPE,
                         year=selection.year, month=selection.month, site=selection.site_id)


@app.route('/api/payroll/bonus', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def payroll_bonus():
    filters = BonusFilters(**json_body())
    summary = PayrollService(backend()).calculate_bonus(
        filters.year, filters.start_month, filters.end_month, filters.site_id)
    return ok(summary, message=f'Bonus calculated for {summary.total_employees} employees')


@app.route('/api/payroll/bonus/csv', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def payroll_bonus_csv():
    filters = BonusFilters(**json_body())
    summary = PayrollService(backend()).calculate_bonus(
        filters.year, filters.start_month, filters.end_month, filters.site_id)
    if not summary.records:
        return jsonify({'success': False, 'message': 'No bonus data to export'}), 400
    return send_document('bonus', filters.csv_filename(), bonus_csv(summary), CSV_MIMETYPE,
                         year=filters.year, site=filters.site_id)


# ============================================================================
# Compliance forms
# ============================================================================

FORM_TYPES = {'b': 'B', 'c': 'C', 'd': 'D'}


def _compliance_request(form_key):
    form_type = FORM_TYPES.get(form_key.lower())
    if not form_type:
        return None, None
    filters = ComplianceFilters(
        year=request.args.get('year'), month=request.args.get('month'), site=request.args.get('site'))
    return form_type, filters


@app.route('/api/forms/sites')
@roles_required(*ADMIN_ROLES)
def compliance_sites():
    return ok(FormsService(backend()).available_sites())


@app.route('/api/forms/<form_key>')
@roles_required(*ADMIN_ROLES)
def compliance_form(form_key):
    form_type, filters = _compliance_request(form_key)
    if not form_type:
        return jsonify({'success': False, 'message': 'Unknown form'}), 404
    form = FormsService(backend()).form(form_type, filters.year, filters.month, filters.site)
    return ok(form.to_dict())


@app.route('/api/forms/<form_key>/download')
@roles_required(*ADMIN_ROLES)
def compliance_download(form_key):
    form_type, filters = _compliance_request(form_key)
    if not form_type:
        return jsonify({'success': False, 'message': 'Unknown form'}), 404
    content = FormsService(backend()).download(form_type, filters.year, filters.month, filters.site)
    filename = form_filename(form_type, filters.site, filters.month, filters.year)
    return send_document('forms', filename, content, XLSX_MIMETYPE,
                         year=filters.year, month=filters.month, site=filters.site)


@app.route('/api/forms/b/csv')
@roles_required(*ADMIN_ROLES)
def compliance_form_b_csv():
    _, filters = _compliance_request('b')
    form = FormsService(backend()).form_b(filters.year, filters.month, filters.site)
    return send_document('forms', form_b_csv_filename(filters.site, filters.year, filters.month),
                         form_b_csv(form), CSV_MIMETYPE,
                         year=filters.year, month=filters.month, site=filters.site)


# ============================================================================
# Supervisor
# ============================================================================

@app.route('/api/supervisor/dashboard')
@roles_required('supervisor')
def supervisor_dashboard():
    service = AttendanceService(backend())
    employees = service.site_employees()
    today = date.today().isoformat()
    records = service.site_attendance(start_date=today, end_date=today)
    present = sum(1 for r in records if r.attendance_status in ('Present', 'Late', 'Half Day'))
    return ok({
        'total_employees': len(employees),
        'marked_today': len(records),
        'present_today': present,
        'absent_today': sum(1 for r in records if r.attendance_status == 'Absent'),
        'unmarked_today': max(len(employees) - len(records), 0),
    })


def _site_salary_summaries(year: int, month: int):
    """Monthly attendance summary for each site employee; failures are skipped"""
    service = AttendanceService(backend())
    employees = [Employee.from_api(e) for e in service.site_employees()]
    selected = request.args.get('employee_id')
    if selected and selected != 'all':
        employees = [e for e in employees if e.employee_id == selected]

    summaries = []
    for employee in employees:
        employee_id = employee.employee_id
        try:
            summary = service.monthly_summary(employee_id, year, month)
        except SessionExpiredError:
            raise
        except BackendError as e:
            logger.warning("Skipping salary summary for %s: %s", employee_id, e.message)
            continue
        summary.employee_id = summary.employee_id or employee_id
        summary.employee_name = summary.employee_name or employee.name
        summaries.append(summary)
    return summaries


@app.route('/api/supervisor/salary-report')
@roles_required('supervisor')
def supervisor_salary_report():
    year, month = period_args()
    summaries = _site_salary_summaries(year, month)
    rows = [dict(to_json(s), band=attendance_band(s.attendance_percentage)) for s in summaries]
    for row in rows:
        row.pop('records', None)
    return ok(rows, totals=site_report_totals(summaries))


@app.route('/api/supervisor/salary-report/csv')
@roles_required('supervisor')
def supervisor_salary_report_csv():
    year, month = period_args()
    summaries = _site_salary_summaries(year, month)
    if not summaries:
        return jsonify({'success': False, 'message': 'No salary data to export'}), 400
    return send_document('reports', site_salary_filename(year, month), site_salary_csv(summaries),
                         CSV_MIMETYPE, year=year, month=month, site=current_user().get('site_id'))


# ============================================================================
# Archive
# ============================================================================

@app.route('/api/documents')
@roles_required(*ADMIN_ROLES)
def list_documents():
    with archive() as repo:
        documents = [d.to_dict() for d in repo.list_documents(request.args.get('kind'))]
    return ok(documents)


@app.route('/api/documents/<path:filename>')
@roles_required(*ADMIN_ROLES)
def download_document(filename):
    with archive() as repo:
        document = repo.get_document(filename)
        path = Path(document.file_path) if document else None
    if not path or not path.exists():
        return jsonify({'success': False, 'message': 'File not found'}), 404
    return send_file(path, as_attachment=True, download_name=path.name)


@app.route('/api/documents/<path:filename>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_document(filename):
    with archive() as repo:
        deleted = repo.delete_document(filename)
    if not deleted:
        return jsonify({'success': False, 'message': 'File not found'}), 404
    return ok(message='File deleted')


@app.route('/api/imports')
@roles_required(*ADMIN_ROLES)
def list_imports():
    with archive() as repo:
        return ok(repo.list_imports(request.args.get('kind')))


if __name__ == '__main__':
    import os
    port = int(os.getenv('PORT', 8000))
    app.run(host='0.0.0.0', port=port, debug=DEBUG)
