from fastapi import APIRouter, HTTPException, Request

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/send")
def send_report(request: Request):
    worker = getattr(request.app.state, "report_worker", None)
    if worker is None:
        raise HTTPException(503, "Report worker not configured")
    return {"success": True, "sent": worker.trigger()}
