# ===================================================================
# 1. IMPORTS
# ===================================================================
import base64
import calendar
import logging
import os
from collections.abc import Callable
from datetime import date, datetime
from typing import Any, cast

from nicegui import app, events, run, ui

# Local application imports
from .challenge import render_challenge_png
from .database import DB_PATH, UPLOAD_DIR, SqliteSubmissionRepository
from .errors import ChallengeMismatchError, FieldValidationError, SubmissionError, UploadRejectedError
from .navigation import applicable_step_ids, calculate_next_step_id, calculate_prev_step_id
from .para import instruction_checklist
from .session_store import SessionStore
from .step_definitions import STEPS_BY_ID
from .step_validation import validate_step
from .submission import submit_application_async
from .summary import format_record_for_display, render_acknowledgement_pdf
from .uploads import save_upload
from .utils import (
    CURRENT_STEP_ERRORS_KEY, DRAFT_KEY, FORM_ATTEMPTED_SUBMISSION_KEY, LAST_CONFIRMATION_KEY,
    MAX_UPLOAD_BYTES, DataframeConfig, FormField, StepDefinition, StepId
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

repository = SqliteSubmissionRepository(DB_PATH)

# Fields whose answer shows or hides other fields; changing one re-renders the step.
CONTROLLING_KEYS: frozenset[str] = frozenset(
    field_conf['field'].show_when[0]
    for step_def in STEPS_BY_ID.values()
    for field_conf in step_def['fields']
    if field_conf['field'].show_when
)

# ===================================================================
# 2. SESSION HELPERS
# ===================================================================

def get_user_storage() -> dict[str, Any]:
    return cast(dict[str, Any], app.storage.user)

def get_store() -> SessionStore:
    """The per-browser session store. Built on every call, the state lives in app.storage.user."""
    return SessionStore(get_user_storage())

def _row_fields(df_field: FormField) -> list[FormField]:
    if not df_field.row_schema:
        return []
    return [field for field in df_field.row_schema.__dict__.values() if isinstance(field, FormField)]

def _default_row(df_field: FormField) -> dict[str, Any]:
    return {field.key: field.default_value for field in _row_fields(df_field)}

def _initial_step_data(step_def: StepDefinition) -> dict[str, Any]:
    data: dict[str, Any] = dict(get_store().record().get(step_def['name']) or {})
    for field_conf in step_def['fields']:
        field = field_conf['field']
        if data.get(field.key) is None:
            data[field.key] = field.default_value
    for df_conf in step_def['dataframes']:
        key = df_conf['field'].key
        if not data.get(key):
            data[key] = [_default_row(df_conf['field'])]
    return data

def get_draft(step_def: StepDefinition) -> dict[str, Any]:
    """
    The unvalidated answers for the step on screen. Widgets write here; the
    session record only changes once the step validates.
    """
    user_storage = get_user_storage()
    draft = user_storage.get(DRAFT_KEY)
    if not draft or draft.get('step') != step_def['name']:
        user_storage[DRAFT_KEY] = {'step': step_def['name'], 'data': _initial_step_data(step_def)}
        user_storage[FORM_ATTEMPTED_SUBMISSION_KEY] = False
        user_storage[CURRENT_STEP_ERRORS_KEY] = {}
    return cast(dict[str, Any], user_storage[DRAFT_KEY]['data'])

def _reset_draft() -> None:
    user_storage = get_user_storage()
    user_storage.pop(DRAFT_KEY, None)
    user_storage[FORM_ATTEMPTED_SUBMISSION_KEY] = False
    user_storage[CURRENT_STEP_ERRORS_KEY] = {}

def _show_field_errors(error: FieldValidationError) -> None:
    user_storage = get_user_storage()
    user_storage[FORM_ATTEMPTED_SUBMISSION_KEY] = True
    user_storage[CURRENT_STEP_ERRORS_KEY] = error.as_dict()
    for field_error in error.errors:
        ui.notification(field_error.message, type='negative', multi_line=True)
    update_step_content.refresh()

# ===================================================================
# 3. NAVIGATION
# ===================================================================

def current_step_id() -> StepId:
    """The stored position, moved forward if an earlier answer made it inapplicable."""
    store = get_store()
    record = store.record()
    step_id = store.current_step
    if step_id != StepId.SUBMITTED and step_id not in applicable_step_ids(record):
        step_id = calculate_next_step_id(step_id, record)
        store.set_current_step(step_id)
    return step_id

def go_to_step(step_id: StepId) -> None:
    get_store().set_current_step(step_id)
    _reset_draft()
    update_step_content.refresh()

def next_step() -> None:
    store = get_store()
    go_to_step(calculate_next_step_id(store.current_step, store.record()))

def prev_step() -> None:
    store = get_store()
    go_to_step(calculate_prev_step_id(store.current_step, store.record()))

async def _handle_step_confirmation(button: ui.button, step_def: StepDefinition) -> None:
    button.disable()
    try:
        draft = get_draft(step_def)
        try:
            validated = validate_step(step_def['id'], draft)
        except FieldValidationError as e:
            _show_field_errors(e)
            return

        if step_def['fields'] or step_def['dataframes']:
            get_store().update(step_def['name'], validated)
            ui.notify("Details saved.", type='positive')
        next_step()
    finally:
        button.enable()

async def _handle_submission(button: ui.button) -> None:
    """Only the insert runs off the loop. The button stays disabled until it resolves."""
    button.disable()
    store = get_store()
    submitter_input = dict(get_draft(STEPS_BY_ID[StepId.SUBMITTER]))
    try:
        confirmation = await submit_application_async(store, submitter_input, repository, run.io_bound)
    except FieldValidationError as e:
        _show_field_errors(e)
        return
    except ChallengeMismatchError as e:
        ui.notify(str(e), type='negative')
        update_step_content.refresh()
        return
    except SubmissionError as e:
        ui.notify(str(e), type='negative', multi_line=True)
        return
    finally:
        button.enable()

    get_user_storage()[LAST_CONFIRMATION_KEY] = {
        'record_id': confirmation.record_id,
        'submitted_at': confirmation.submitted_at.isoformat(timespec='seconds'),
        'payload': dict(confirmation.payload),
    }
    _reset_draft()
    ui.navigate.to('/success')

# ===================================================================
# 4. UI CREATION HELPERS
# ===================================================================

def _on_change(f: FormField, data_source: dict[str, Any]) -> Callable[[Any], None]:
    def handler(e: Any) -> None:
        data_source[f.key] = e.value
        if f.key in CONTROLLING_KEYS:
            update_step_content.refresh()
    return handler

def _create_composite_date_input(
    field: FormField,
    data_source: dict[str, Any],
    current_errors: dict[str, str],
    error_key: str,
    form_attempted: bool
) -> None:
    """
    Day/month/year selects that auto-correct the day for the selected month
    and year, stored as YYYY-MM-DD.
    """
    stored_value = data_source.get(field.key)
    d, m, y = None, None, None
    if isinstance(stored_value, str):
        try:
            dt_obj = datetime.strptime(stored_value, '%Y-%m-%d').date()
            d, m, y = dt_obj.day, dt_obj.month, dt_obj.year
        except ValueError:
            pass

    state = {'d': d, 'm': m, 'y': y}

    def sync_model() -> None:
        if not (state['y'] and state['m'] and state['d']):
            data_source[field.key] = None
            return
        try:
            # Raises ValueError for an invalid date like Feb 30
            data_source[field.key] = date(state['y'], state['m'], state['d']).strftime('%Y-%m-%d')
        except ValueError:
            data_source[field.key] = None

    @ui.refreshable
    def day_select_container() -> None:
        def handle_day_change(e: Any) -> None:
            state['d'] = e.value
            sync_model()

        is_error = form_attempted and current_errors.get(error_key) and not state['d']
        ui.select(list(range(1, 32)), value=state['d'], label='Day', on_change=handle_day_change).classes('col').props(f"outlined dense error={is_error}")

    def handle_month_year_change() -> None:
        if state['y'] and state['m']:
            max_days = calendar.monthrange(state['y'], state['m'])[1]
            if state['d'] and state['d'] > max_days:
                state['d'] = max_days
        day_select_container.refresh()
        sync_model()

    def handle_month_select(e: Any) -> None:
        state['m'] = e.value
        handle_month_year_change()

    def handle_year_select(e: Any) -> None:
        state['y'] = e.value
        handle_month_year_change()

    with ui.column().classes('w-full no-wrap'):
        ui.label(field.label).classes('text-caption q-mb-xs')
        with ui.row().classes('w-full items-start no-wrap'):
            day_select_container()

            is_m_error = form_attempted and current_errors.get(error_key) and not state['m']
            ui.select(list(range(1, 13)), value=state['m'], label='Month', on_change=handle_month_select).classes('col').props(f"outlined dense error={is_m_error}")

            is_y_error = form_attempted and current_errors.get(error_key) and not state['y']
            ui.select(list(range(date.today().year, 1999, -1)), value=state['y'], label='Year', on_change=handle_year_select).classes('col').props(f"outlined dense error={is_y_error}")
        if form_attempted and current_errors.get(error_key):
            ui.label(current_errors[error_key]).classes('text-negative text-caption')

def _create_text_input(f: FormField, v: Any, data_source: dict[str, Any]) -> ui.input:
    return ui.input(label=f.label, value=v or '', on_change=_on_change(f, data_source))

def _create_select_input(f: FormField, v: Any, data_source: dict[str, Any]) -> ui.select:
    return ui.select(options=f.options or [], label=f.label, value=v, on_change=_on_change(f, data_source))

def _create_radio_buttons(f: FormField, v: Any, data_source: dict[str, Any]) -> ui.radio:
    ui.label(f.label).classes('text-body2')
    return ui.radio(options=f.options or [], value=v, on_change=_on_change(f, data_source)).props('inline')

def _create_checkbox_input(f: FormField, v: Any, data_source: dict[str, Any]) -> ui.checkbox:
    return ui.checkbox(text=f.label, value=bool(v), on_change=_on_change(f, data_source))

def _create_file_input(f: FormField, v: Any, data_source: dict[str, Any]) -> ui.upload:
    """Uploads go straight to disk; the record keeps only the returned reference."""
    def handle_upload(e: events.UploadEventArguments) -> None:
        try:
            reference = save_upload(e.name, e.type, e.content.read(), UPLOAD_DIR)
        except UploadRejectedError as err:
            ui.notify(str(err), type='negative')
            return
        data_source[f.key] = reference
        ui.notify(f"Uploaded {e.name}.", type='positive')
        update_step_content.refresh()

    ui.label(f.label).classes('text-body2')
    if v:
        ui.label(f"Attached: {str(v).split('_', 1)[-1]}").classes('text-caption text-positive')
    uploader = ui.upload(
        on_upload=handle_upload,
        on_rejected=lambda: ui.notify("File size exceeds 5MB limit.", type='negative'),
        max_file_size=MAX_UPLOAD_BYTES,
        auto_upload=True,
    )
    uploader.props('accept=".pdf,.jpg,.jpeg,.png" flat bordered').classes('w-full')
    return uploader

def create_field(field_definition: FormField,
                 data_source: dict[str, Any],
                 error_key_prefix: str = "") -> None:
    """Creates a UI element based on a FormField definition, bound to `data_source`."""
    if not field_definition.is_visible(data_source):
        return

    if field_definition.key not in data_source:
        data_source[field_definition.key] = field_definition.default_value

    current_value = data_source.get(field_definition.key)
    user_storage = get_user_storage()
    form_attempted: bool = user_storage.get(FORM_ATTEMPTED_SUBMISSION_KEY, False)
    current_errors: dict[str, str] = user_storage.get(CURRENT_STEP_ERRORS_KEY, {})

    error_key = f"{error_key_prefix}{field_definition.key}"
    error_message: str | None = current_errors.get(error_key) if form_attempted else None

    with ui.column().classes('w-full no-wrap q-mb-sm'):
        if field_definition.ui_type == 'date':
            _create_composite_date_input(field_definition, data_source,
                                         current_errors, error_key, form_attempted)
            return

        creator_map: dict[str, Callable[..., Any]] = {
            'text': _create_text_input,
            'select': _create_select_input,
            'radio': _create_radio_buttons,
            'checkbox': _create_checkbox_input,
            'file': _create_file_input,
        }
        creator = creator_map.get(field_definition.ui_type)
        if not creator: raise ValueError(f"Unsupported UI type: {field_definition.ui_type}")

        element = creator(field_definition, current_value, data_source)
        if field_definition.ui_type in ('text', 'select'):
            props_list: list[str] = ['outlined', 'dense']
            if field_definition.max_length:
                props_list.append(f"maxlength={field_definition.max_length}")
            if error_message:
                props_list.append(f'error-message="{error_message}"')
                props_list.append('error')
            element.props(' '.join(props_list)).classes('w-full')
        elif error_message:
            ui.label(error_message).classes('text-negative text-caption')

# ===================================================================
# 5. STEP RENDERERS
# ===================================================================

def _render_dataframe_editor(df_conf: DataframeConfig, data_source: dict[str, Any]) -> None:
    """Renders one card per row, with add and delete buttons."""
    main_df_field = df_conf['field']
    dataframe_key = main_df_field.key
    column_definitions = _row_fields(main_df_field)

    user_storage = get_user_storage()
    if user_storage.get(FORM_ATTEMPTED_SUBMISSION_KEY):
        row_count_error = user_storage.get(CURRENT_STEP_ERRORS_KEY, {}).get(dataframe_key)
        if row_count_error:
            ui.label(row_count_error).classes('text-negative')

    @ui.refreshable
    def render_cards() -> None:
        data_list = cast(list[dict[str, Any]], data_source.get(dataframe_key, []))
        if not data_list:
            ui.label("No entries added yet.").classes("text-italic text-grey q-pa-md text-center full-width")
        for i, row_data in enumerate(data_list):
            with ui.card().classes('w-full q-mb-md').props("bordered flat"):
                with ui.card_section().classes('w-full !py-2'):
                    with ui.row().classes('w-full justify-between items-center no-wrap'):
                        ui.label(f"{main_df_field.label} #{i + 1}").classes('text-bold text-body1')
                        ui.button(icon='delete_outline', on_click=lambda _, idx=i: (data_list.pop(idx), render_cards.refresh()), color='grey-6').props('flat dense round padding=xs')
                ui.separator()
                with ui.card_section():
                    for col_field_def in column_definitions:
                        create_field(
                            field_definition=col_field_def,
                            data_source=row_data,
                            error_key_prefix=f"{dataframe_key}[{i}]."
                        )

    def add_new_row() -> None:
        data_list: list[dict[str, Any]] = data_source.setdefault(dataframe_key, [])
        data_list.append(_default_row(main_df_field))
        render_cards.refresh()

    render_cards()
    ui.button(f"Add {main_df_field.label}", on_click=add_new_row, icon='add').classes('q-mt-sm').props('outline color=primary')

def render_instructions_step(step_def: StepDefinition) -> None:
    ui.label(step_def['title']).classes('text-h6 q-mb-xs')
    ui.markdown(step_def['subtitle'])
    ui.markdown(
        "As per the regulations, it is mandatory for all companies and individuals to submit "
        "their KYC details. Please keep the following ready before you begin:"
    )
    with ui.column().classes('q-ml-md'):
        for item in instruction_checklist:
            ui.label(f"• {item}")
    ui.label("Your answers are kept in this browser for 24 hours.").classes('text-caption text-grey q-mt-md')
    with ui.row().classes('w-full q-mt-lg justify-end'):
        proceed_button = ui.button("Proceed to Registration →").props('color=primary unelevated')
        proceed_button.on('click', lambda: _handle_step_confirmation(proceed_button, step_def))

def render_generic_step(step_def: StepDefinition) -> None:
    """Renders a full step UI from its definition: simple fields, then row editors."""
    ui.label(step_def['title']).classes('text-h6 q-mb-xs')
    ui.markdown(step_def['subtitle'])
    draft = get_draft(step_def)

    for field_conf in step_def.get('fields', []):
        create_field(field_definition=field_conf['field'], data_source=draft)

    for df_conf in step_def.get('dataframes', []):
        _render_dataframe_editor(df_conf, draft)

    with ui.row().classes('w-full q-mt-lg justify-between items-center'):
        ui.button("← Back", on_click=prev_step).props('flat color=grey')
        confirm_button = ui.button("Save & Continue →").props('color=primary unelevated')
        confirm_button.on('click', lambda: _handle_step_confirmation(confirm_button, step_def))

def _render_challenge(draft: dict[str, Any]) -> None:
    """Shows a freshly issued code; the previous one stops working."""
    code = get_store().issue_challenge()
    draft['verification_code'] = ''
    data_url = 'data:image/png;base64,' + base64.b64encode(render_challenge_png(code)).decode('utf-8')
    with ui.row().classes('items-center q-mt-md'):
        ui.image(data_url).style('width: 180px; height: 50px;').classes('rounded-borders')
        ui.button("↻ Refresh", on_click=lambda: update_step_content.refresh()).props('flat dense color=primary')

def _show_summary_dialog() -> None:
    with ui.dialog() as dialog, ui.card().style('min-width: 600px'):
        ui.label('Form Summary').classes('text-h6')
        for title, rows in format_record_for_display(get_store().record()).items():
            ui.label(title).classes('text-subtitle1 text-bold q-mt-sm')
            for label, value in rows:
                with ui.row().classes('w-full no-wrap'):
                    ui.label(label).classes('col-5 text-grey-8')
                    ui.label(value).classes('col')
        ui.button('Close', on_click=dialog.close).props('flat')
    dialog.open()

def render_submitter_step(step_def: StepDefinition) -> None:
    ui.label(step_def['title']).classes('text-h6 q-mb-xs')
    ui.markdown(step_def['subtitle'])
    draft = get_draft(step_def)

    for field_conf in step_def['fields']:
        if field_conf['field'].key == 'verification_code':
            _render_challenge(draft)
        create_field(field_definition=field_conf['field'], data_source=draft)

    with ui.row().classes('w-full q-mt-lg justify-between items-center'):
        ui.button("← Back", on_click=prev_step).props('flat color=grey')
        with ui.row().classes('items-center no-wrap q-gutter-md'):
            ui.button("Review answers", on_click=_show_summary_dialog).props('outline color=primary icon=visibility')
            submit_button = ui.button("Submit").props('color=primary unelevated icon=send')
            submit_button.on('click', lambda: _handle_submission(submit_button))

# ===================================================================
# 6. THE STEP CONTROLLER
# ===================================================================

@ui.refreshable
def update_step_content() -> None:
    """Fetches the current step and decides which renderer to call."""
    step_id = current_step_id()
    if step_id == StepId.SUBMITTED:
        ui.navigate.to('/success')
        return
    step_to_render = STEPS_BY_ID.get(step_id)
    if not step_to_render:
        ui.label(f"Error: unknown step ({step_id})").classes('text-negative text-h6')
        return

    sequence = applicable_step_ids(get_store().record())
    position = sequence.index(step_id) + 1
    ui.label(f"Step {position} of {len(sequence)}").classes('text-caption text-grey')

    if step_id == StepId.INSTRUCTIONS:
        render_instructions_step(step_to_render)
    elif step_id == StepId.SUBMITTER:
        render_submitter_step(step_to_render)
    else:
        render_generic_step(step_to_render)

# ===================================================================
# 7. PAGE ROUTING
# ===================================================================

@ui.page('/success')
def success_page() -> None:
    confirmation = get_user_storage().get(LAST_CONFIRMATION_KEY)
    if not confirmation:
        ui.navigate.to('/')
        return

    def download_acknowledgement() -> None:
        pdf_bytes = render_acknowledgement_pdf(
            confirmation['record_id'], confirmation['submitted_at'], confirmation['payload'])
        ui.download(pdf_bytes, f"kyc_acknowledgement_{confirmation['record_id']}.pdf")

    def start_over() -> None:
        get_user_storage().pop(LAST_CONFIRMATION_KEY, None)
        ui.navigate.to('/')

    with ui.card().classes('absolute-center q-pa-lg items-center'):
        ui.icon('check_circle', size='xl', color='positive')
        ui.label('Thank you! Your KYC details have been submitted.').classes('text-h6')
        ui.label(f"Reference number: {confirmation['record_id']}").classes('text-subtitle1')
        ui.label(f"Submitted at {confirmation['submitted_at']}").classes('text-caption text-grey')
        with ui.row().classes('q-mt-md'):
            ui.button("Download acknowledgement", on_click=download_acknowledgement).props('color=primary unelevated icon=download')
            ui.button("Start a new registration", on_click=start_over).props('flat color=primary')

@ui.page('/')
def main_page() -> None:
    ui.query('body').style('background-color: #f0f2f5;')
    with ui.header(elevated=True).classes('bg-primary text-white q-pa-sm items-center'):
        ui.label("Business Partner KYC Registration").classes('text-h5')

    with ui.column().classes('w-full items-center q-mt-lg'):
        with ui.card().classes('q-pa-md shadow-4').style('width: 95%; max-width: 900px;'):
            with ui.column().classes('w-full'):
                update_step_content()

def main() -> None:
    repository.setup_database()
    port = int(os.environ.get('PORT', 8080))
    ui.run(
        host='0.0.0.0',
        port=port,
        title='Partner KYC',
        reload=False,
        storage_secret=os.environ.get('STORAGE_SECRET', 'a_very_secure_secret_key_for_local_dev'),
    )

if __name__ in {"__main__", "__mp_main__"}:
    main()
