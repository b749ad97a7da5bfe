from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_db, require_session
from src.dashboard import boards

router = APIRouter(prefix="/kanban")


@router.get("/activities", tags=["Dashboard"])
def activity_board(
    branch: str = Query(..., description="Branch name as stored on submissions"),
    date: str = Query(..., description="Activity date, YYYY-MM-DD"),
    db=Depends(get_db),
):
    return boards.activity_board(db.list_activity_rows(branch, date))


@router.get("/activities/{activity_name}", tags=["Dashboard"])
def activity_detail(activity_name: str, branch: str = Query(...), date: str = Query(...), db=Depends(get_db)):
    return boards.activity_detail(db.list_activity_rows(branch, date), activity_name)


@router.get("/groups", tags=["Dashboard"])
def groups(branch: str = Query(...), date: str = Query(...), db=Depends(get_db)):
    return {"groups": boards.list_groups(db.list_activity_rows(branch, date))}


@router.get("/groups/{group}", tags=["Dashboard"])
def group_board(group: str, branch: str = Query(...), date: str = Query(...), db=Depends(get_db)):
    return boards.group_board(db.list_activity_rows(branch, date), group)


@router.get("/clinfo/{submission_id}", tags=["Dashboard"], dependencies=[Depends(require_session)])
def client_info(submission_id: str, db=Depends(get_db)):
    detail = db.get_submission_detail(submission_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    return boards.client_info(detail)
