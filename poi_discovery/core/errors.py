from __future__ import annotations

from fastapi import HTTPException


def bad_request(code: str, message: str):
    raise HTTPException(status_code=400, detail={"code": code, "message": message})


def unprocessable(code: str, message: str):
    raise HTTPException(status_code=422, detail={"code": code, "message": message})
