import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from todo_api.core.database import get_db
from todo_api.core.deps import AuthContext, get_auth_context
from todo_api.core.errors import NotFoundError
from todo_api.core.security import utcnow
from todo_api.models import Todo, TodoPriority, TodoStatus
from todo_api.schemas import ApiResponse, PaginatedTodos, TodoCreate, TodoOut, TodoUpdate

router = APIRouter(prefix="/todos", tags=["todos"])

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _get_owned_todo(db: Session, todo_id: str, auth: AuthContext) -> Todo:
    todo = db.query(Todo).filter(Todo.id == todo_id, Todo.user_id == auth.user_id).first()
    if not todo:
        raise NotFoundError("Todo not found")
    return todo


@router.get("", response_model=ApiResponse[PaginatedTodos])
def list_todos(
    page: int = 1,
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    todo_status: Optional[TodoStatus] = Query(default=None, alias="status"),
    priority: Optional[TodoPriority] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    page = max(1, page)
    page_size = min(MAX_PAGE_SIZE, max(1, page_size))
    query = db.query(Todo).filter(Todo.user_id == auth.user_id)
    if todo_status:
        query = query.filter(Todo.status == todo_status.value)
    if priority:
        query = query.filter(Todo.priority == priority.value)
    total = query.count()
    items = (
        query.order_by(Todo.created_at.desc(), Todo.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return ApiResponse[PaginatedTodos](
        data=PaginatedTodos(
            items=[TodoOut.model_validate(item) for item in items],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )
    )


@router.get("/{todo_id}", response_model=ApiResponse[TodoOut])
def get_todo(todo_id: str, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    todo = _get_owned_todo(db, todo_id, auth)
    return ApiResponse[TodoOut](data=TodoOut.model_validate(todo))


@router.post("", response_model=ApiResponse[TodoOut], status_code=status.HTTP_201_CREATED)
def create_todo(payload: TodoCreate, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    todo = Todo(
        user_id=auth.user_id,
        title=payload.title,
        description=payload.description or None,
        priority=payload.priority.value,
        status=TodoStatus.PENDING.value,
        due_date=payload.due_date,
    )
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return ApiResponse[TodoOut](data=TodoOut.model_validate(todo))


@router.patch("/{todo_id}", response_model=ApiResponse[TodoOut])
def update_todo(
    todo_id: str,
    payload: TodoUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    todo = _get_owned_todo(db, todo_id, auth)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if isinstance(value, (TodoPriority, TodoStatus)):
            value = value.value
        setattr(todo, field, value)
    todo.updated_at = utcnow()
    db.commit()
    db.refresh(todo)
    return ApiResponse[TodoOut](data=TodoOut.model_validate(todo))


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(todo_id: str, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    todo = _get_owned_todo(db, todo_id, auth)
    db.delete(todo)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
