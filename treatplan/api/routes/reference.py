from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from treatplan.infra.Reference_Repository import load_reference_data

router = APIRouter(prefix="/api/reference", tags=["reference"])


@router.get("/treatments")
def list_treatments():
    return {"treatments": load_reference_data().treatments}


@router.get("/goals")
def list_goals():
    return {"goals": load_reference_data().goals}


@router.get("/findings")
def list_findings():
    ref = load_reference_data()
    return {
        "findings": ref.findings,
        "by_area": [{"area": area, "findings": findings} for area, findings in ref.findings_by_area],
    }


@router.get("/regions")
def list_regions():
    ref = load_reference_data()
    return {"regions": ref.regions, "timelines": ref.timelines, "recurring": ref.recurring_options}


@router.get("/findings/{finding}")
def lookup_finding(finding: str):
    match = load_reference_data().lookup_finding(finding)
    if match is None:
        raise HTTPException(status_code=404, detail="Finding not mapped")
    return {"finding": finding, "goal": match.goal, "region": match.region, "treatments": list(match.treatments)}


@router.get("/treatments/{treatment}/products")
def treatment_products(treatment: str, context: str = ""):
    ref = load_reference_data()
    return {
        "treatment": treatment,
        "products": ref.products_for_treatment(treatment),
        "multiple": ref.supports_multiple_products(treatment),
        "recommended": ref.recommended_products(treatment, context),
    }


@router.get("/treatments/{treatment}/quantity")
def treatment_quantity(treatment: str):
    ctx = load_reference_data().quantity_context(treatment)
    return {"treatment": treatment, "unit": ctx.unit_label, "options": list(ctx.options)}


@router.get("/treatments/{treatment}/findings")
def treatment_findings(treatment: str):
    ref = load_reference_data()
    goals, regions = ref.goals_and_regions_for_treatment(treatment)
    return {
        "treatment": treatment,
        "by_area": [{"area": a, "findings": f} for a, f in ref.findings_by_area_for_treatment(treatment)],
        "goals": goals,
        "regions": regions,
    }


@router.get("/treatments/{treatment}/post-care")
def treatment_post_care(treatment: str):
    post_care = load_reference_data().post_care(treatment)
    if post_care is None:
        raise HTTPException(status_code=404, detail="No post-care for treatment")
    data = asdict(post_care)
    data["suggested_products"] = list(post_care.suggested_products)
    return {"treatment": treatment, **data}
