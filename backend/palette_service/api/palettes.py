"""
Palette API Routes
Palette generation from photos and CRUD for the saved palette list.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from palette_service.schemas import (
    CreatePaletteRequest,
    ErrorResponse,
    GeneratePaletteRequest,
    GeneratePaletteResponse,
    PaletteListResponse,
    SavedPaletteModel,
    UpdatePaletteRequest,
)
from palette_service.services.generator import PaletteGenerator
from palette_service.services.imaging import PayloadTooLargeError
from palette_service.services.store import PaletteNotFoundError, PaletteStore, SavedPalette
from palette_service.utils.ids import generate_request_id
from palette_service.utils.logging import get_logger

router = APIRouter(prefix="/api", tags=["Palettes"])


def get_palette_store(request: Request) -> PaletteStore:
    """Store instance attached to the app at startup."""
    return request.app.state.palette_store


def get_palette_generator(request: Request) -> PaletteGenerator:
    return request.app.state.palette_generator


def _to_model(palette: SavedPalette) -> SavedPaletteModel:
    return SavedPaletteModel(id=palette.id, colors=palette.colors, name=palette.name)


@router.post("/generate-palette",
             response_model=GeneratePaletteResponse,
             responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse},
                        500: {"model": ErrorResponse}},
             summary="Generate Palette",
             description="Derive 3-5 representative hex colors from an encoded photo")
async def generate_palette(
    body: GeneratePaletteRequest,
    generator: PaletteGenerator = Depends(get_palette_generator),
):
    """
    Generate a palette from a data-URI encoded image.

    An image with no usable colors (e.g. entirely near-black) yields an
    empty palette, not an error.
    """
    if not body.image:
        return JSONResponse(status_code=400, content={"message": "Image is required"})

    request_id = generate_request_id()
    try:
        palette = await run_in_threadpool(generator.generate, body.image, request_id)
    except PayloadTooLargeError as e:
        return JSONResponse(status_code=413, content={"message": str(e)})
    except Exception as e:
        get_logger().exception(
            "Error generating palette",
            extra={"request_id": request_id, "error_type": type(e).__name__}
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    return GeneratePaletteResponse(palette=palette)


@router.get("/palettes", response_model=PaletteListResponse)
def list_palettes(store: PaletteStore = Depends(get_palette_store)):
    """List saved palettes in the order they were saved."""
    return PaletteListResponse(palettes=[_to_model(p) for p in store.list()])


@router.post("/palettes", response_model=SavedPaletteModel, status_code=201)
def create_palette(body: CreatePaletteRequest, store: PaletteStore = Depends(get_palette_store)):
    """Save a palette; the store assigns its id and default name."""
    palette_id = store.add(body.colors, name=body.name)
    return _to_model(store.get(palette_id))


@router.post("/palettes/demo", response_model=PaletteListResponse)
def seed_demo_palettes(store: PaletteStore = Depends(get_palette_store)):
    """Replace the saved list with demo palettes of random colors."""
    return PaletteListResponse(palettes=[_to_model(p) for p in store.seed_demo()])


@router.get("/palettes/{palette_id}", response_model=SavedPaletteModel,
            responses={404: {"model": ErrorResponse}})
def get_palette(palette_id: str, store: PaletteStore = Depends(get_palette_store)):
    try:
        return _to_model(store.get(palette_id))
    except PaletteNotFoundError:
        raise HTTPException(status_code=404, detail=f"Palette {palette_id} not found")


@router.patch("/palettes/{palette_id}", response_model=SavedPaletteModel,
              responses={404: {"model": ErrorResponse}})
def update_palette(palette_id: str, body: UpdatePaletteRequest,
                   store: PaletteStore = Depends(get_palette_store)):
    """Rename a palette and/or replace its colors."""
    try:
        return _to_model(store.update(palette_id, colors=body.colors, name=body.name))
    except PaletteNotFoundError:
        raise HTTPException(status_code=404, detail=f"Palette {palette_id} not found")


@router.delete("/palettes/{palette_id}", status_code=204,
               responses={404: {"model": ErrorResponse}})
def delete_palette(palette_id: str, store: PaletteStore = Depends(get_palette_store)):
    try:
        store.delete(palette_id)
    except PaletteNotFoundError:
        raise HTTPException(status_code=404, detail=f"Palette {palette_id} not found")
    return Response(status_code=204)


@router.delete("/palettes", status_code=204)
def clear_palettes(store: PaletteStore = Depends(get_palette_store)):
    store.clear()
    return Response(status_code=204)
