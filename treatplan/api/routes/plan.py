"""Plan editing endpoints.

One PlanEditor per open patient, kept in-process in _editors. Every
mutating endpoint answers with the refreshed plan; a write rejected by
the record store answers 502 after the plan has been rolled back.
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import JSONResponse

from treatplan.domain.Patient import Patient
from treatplan.infra.Record_Store import JsonFileRecordStore, build_record_store
from treatplan.infra.Reference_Repository import load_reference_data
from treatplan.infra.pdf_utils import generate_pdf_for_plan
from treatplan.infra.plan_codec import serialize_items
from treatplan.logic.editor import PlanEditor
from treatplan.logic.reporting.summary import build_share_message, format_record_line
from treatplan.utilities.config import DISCUSSED_FIELD, PROVIDER_NAME
from treatplan.utilities.constants import OTHER_FINDING_LABEL
from treatplan.utilities.validators import (
    ChoiceInput,
    EditItemInput,
    EntryFieldsInput,
    EntryModeInput,
    MoveInput,
    OpenPlanInput,
    PostCareInput,
    ProductChoiceInput,
)

router = APIRouter(prefix="/api/plan", tags=["plan"])
logger = logging.getLogger(__name__)

_editors: Dict[str, PlanEditor] = {}
_store = None


def get_record_store():
    global _store
    if _store is None:
        _store = build_record_store()
    return _store


def _get_editor(patient_id: str) -> PlanEditor:
    editor = _editors.get(patient_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="No open plan for patient")
    return editor


def _plan_payload(editor: PlanEditor) -> dict:
    items = editor.plan.get_items()
    return {
        "patient_id": editor.patient.id,
        "items": [i.to_dict() for i in items],
        "sections": [
            {"name": name, "items": [dict(i.to_dict(), line=format_record_line(i)) for i in bucket]}
            for name, bucket in editor.sections()
        ],
        "field": serialize_items(items),
    }


async def _apply(editor: PlanEditor, action):
    '''Runs a controller coroutine; maps a failed write to 502 and a no-op to success=false.'''
    editor.sync.last_error = None
    result = await action
    if editor.sync.last_error:
        return JSONResponse(status_code=502, content={"success": False, "error": editor.sync.last_error})
    return {"success": bool(result), **_plan_payload(editor)}


# -------------------- Session lifecycle --------------------
@router.post("/open")
def open_plan(data: OpenPlanInput):
    store = get_record_store()
    discussed = data.discussed
    name = data.name or ""
    issues = list(data.interested_issues)
    if discussed is None and isinstance(store, JsonFileRecordStore):
        record = store.read_record(data.patient_id, data.table_source)
        stored = Patient.from_record(record, data.table_source, DISCUSSED_FIELD)
        discussed = stored.discussed_field
        name = name or stored.name
        issues = issues or stored.interested_issues
    patient = Patient(
        id=data.patient_id,
        name=name,
        table_source=data.table_source,
        interested_issues=issues,
        discussed_field=discussed or "",
    )
    previous = _editors.pop(patient.id, None)
    if previous is not None:
        previous.close()
    editor = PlanEditor.open(patient, store, load_reference_data())
    _editors[patient.id] = editor
    return {"success": True, **_plan_payload(editor)}


@router.post("/{patient_id}/close")
def close_plan(patient_id: str):
    editor = _get_editor(patient_id)
    editor.close()
    _editors.pop(patient_id, None)
    return {"success": True}


@router.get("/{patient_id}")
def get_plan(patient_id: str):
    return _plan_payload(_get_editor(patient_id))


# -------------------- Add-entry session --------------------
@router.get("/{patient_id}/entry")
def get_entry(patient_id: str):
    return _get_editor(patient_id).session.to_dict()


@router.post("/{patient_id}/entry/mode")
def set_entry_mode(patient_id: str, data: EntryModeInput):
    session = _get_editor(patient_id).session
    session.set_mode(data.mode)
    return session.to_dict()


@router.post("/{patient_id}/entry/goal")
def select_goal(patient_id: str, data: ChoiceInput):
    session = _get_editor(patient_id).session
    session.select_goal(data.label, data.other_text)
    return session.to_dict()


@router.post("/{patient_id}/entry/finding")
def toggle_finding(patient_id: str, data: ChoiceInput):
    session = _get_editor(patient_id).session
    if data.label == OTHER_FINDING_LABEL and data.other_text:
        session.set_other_finding(data.other_text)
    else:
        session.toggle_finding(data.label)
    return session.to_dict()


@router.post("/{patient_id}/entry/treatment")
def select_treatment(patient_id: str, data: ChoiceInput):
    session = _get_editor(patient_id).session
    session.select_treatment(data.label, data.other_text)
    return session.to_dict()


@router.post("/{patient_id}/entry/product")
def select_product(patient_id: str, data: ProductChoiceInput):
    session = _get_editor(patient_id).session
    session.select_product(data.treatment, data.label, data.other_text)
    return session.to_dict()


@router.post("/{patient_id}/entry/fields")
def set_entry_fields(patient_id: str, data: EntryFieldsInput):
    session = _get_editor(patient_id).session
    fields = data.model_dump(exclude_unset=True)
    if "region" in fields:
        session.set_region(fields.pop("region"), fields.pop("region_other_text", ""))
    fields.pop("region_other_text", None)
    session.set_details(**fields)
    return session.to_dict()


@router.post("/{patient_id}/entry/reset")
def reset_entry(patient_id: str):
    session = _get_editor(patient_id).session
    session.reset()
    return session.to_dict()


@router.post("/{patient_id}/entry/submit")
async def submit_entry(patient_id: str):
    editor = _get_editor(patient_id)
    if not editor.session.can_add:
        return {"success": False, "added": [], **_plan_payload(editor)}
    editor.sync.last_error = None
    added = await editor.composer.add_to_plan()
    if editor.sync.last_error:
        return JSONResponse(status_code=502, content={"success": False, "error": editor.sync.last_error})
    return {"success": bool(added), "added": [i.to_dict() for i in added], **_plan_payload(editor)}


# -------------------- Moves and lifecycle --------------------
@router.post("/{patient_id}/move")
async def move_item(patient_id: str, data: MoveInput):
    editor = _get_editor(patient_id)
    return await _apply(editor, editor.drag.move(data.item_id, data.target))


@router.post("/{patient_id}/items/{item_id}/complete")
async def complete_item(patient_id: str, item_id: str):
    editor = _get_editor(patient_id)
    return await _apply(editor, editor.lifecycle.mark_completed(item_id))


@router.post("/{patient_id}/items/{item_id}/complete-next-visit")
async def complete_and_add_next_visit(patient_id: str, item_id: str):
    editor = _get_editor(patient_id)
    return await _apply(editor, editor.lifecycle.complete_and_add_next_visit(item_id))


@router.post("/{patient_id}/items/{item_id}/add-again")
async def add_item_again(patient_id: str, item_id: str):
    editor = _get_editor(patient_id)
    return await _apply(editor, editor.lifecycle.add_again(item_id))


@router.post("/{patient_id}/items/{item_id}/remove-request")
def request_remove(patient_id: str, item_id: str):
    editor = _get_editor(patient_id)
    if not editor.lifecycle.request_remove(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"success": True, "pending_removal": item_id}


@router.post("/{patient_id}/items/{item_id}/remove-confirm")
async def confirm_remove(patient_id: str, item_id: str):
    editor = _get_editor(patient_id)
    return await _apply(editor, editor.lifecycle.confirm_remove(item_id))


@router.post("/{patient_id}/remove-cancel")
def cancel_remove(patient_id: str):
    _get_editor(patient_id).lifecycle.cancel_remove()
    return {"success": True, "pending_removal": None}


@router.put("/{patient_id}/items/{item_id}")
async def edit_item(patient_id: str, item_id: str, data: EditItemInput):
    editor = _get_editor(patient_id)
    changes = data.model_dump(exclude_unset=True)
    quantity_unit: Optional[str] = changes.pop("quantity_unit", None)
    return await _apply(editor, editor.lifecycle.edit(item_id, quantity_unit=quantity_unit, **changes))


# -------------------- Post-care --------------------
@router.get("/{patient_id}/post-care")
def list_post_care(patient_id: str):
    editor = _get_editor(patient_id)
    treatments = sorted({i.treatment for i in editor.plan.get_items()})
    result = []
    for treatment in treatments:
        post_care = editor.reference.post_care(treatment)
        if post_care is None:
            continue
        result.append({
            "treatment": treatment,
            "label": post_care.label,
            "instructions": post_care.instructions,
            "products": [
                {"name": p, "can_add": editor.lifecycle.can_add_post_care(p)}
                for p in post_care.suggested_products
            ],
        })
    return {"post_care": result}


@router.post("/{patient_id}/post-care")
async def add_post_care(patient_id: str, data: PostCareInput):
    editor = _get_editor(patient_id)
    return await _apply(editor, editor.lifecycle.add_post_care_product(data.treatment, data.product))


# -------------------- Sharing --------------------
@router.get("/{patient_id}/share-message")
def share_message(patient_id: str):
    editor = _get_editor(patient_id)
    return {"message": build_share_message(PROVIDER_NAME, editor.plan.get_items())}


@router.get("/{patient_id}/pdf")
def export_pdf(patient_id: str):
    editor = _get_editor(patient_id)
    pdf_bytes = generate_pdf_for_plan(editor.patient.name, editor.sections())
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=treatment_plan_{patient_id}.pdf"
        },
    )
