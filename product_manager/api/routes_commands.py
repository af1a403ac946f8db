from fastapi import APIRouter, Depends, HTTPException

from product_manager.api.deps import get_controller
from product_manager.schemas.command_schema import CommandIn
from product_manager.services.controller import AppController, CommandError

router = APIRouter(tags=["commands"])


@router.get("/state", summary="Current view state")
async def get_state(controller: AppController = Depends(get_controller)):
    return controller.render()


@router.post("/commands", summary="Dispatch a UI command")
async def dispatch_command(payload: CommandIn, controller: AppController = Depends(get_controller)):
    try:
        await controller.dispatch(payload.to_command())
    except CommandError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return controller.render()
