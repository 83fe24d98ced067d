from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
import logging
import tplhtml
from tplhtml import list_levels, tables
from tplhtml.config import DEFAULT_CONFIG
from tplhtml.editing import EditingSession
from tplhtml.nodes import make_document

logger = logging.getLogger('tplhtml')

app = FastAPI(title="HTML Template Editor API")

# Enable CORS for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Editing commands: name -> handler(session, value)
COMMANDS = {
    "indent": lambda s, v: list_levels.indent(s),
    "outdent": lambda s, v: list_levels.outdent(s),
    "tab": lambda s, v: s.handle_key_down("Tab"),
    "shift_tab": lambda s, v: s.handle_key_down("Tab", shift=True),
    "start_list_at": lambda s, v: list_levels.start_list_at(s, v),
    "toggle_ordered_list": lambda s, v: list_levels.toggle_ordered_list(s),
    "toggle_bullet_list": lambda s, v: list_levels.toggle_bullet_list(s),
    "toggle_heading": lambda s, v: s.toggle_heading(int(v)),
    "set_paragraph": lambda s, v: s.set_paragraph(),
    "insert_table": lambda s, v: tables.insert_table(s),
    "add_row_before": lambda s, v: tables.add_row_before(s),
    "add_row_after": lambda s, v: tables.add_row_after(s),
    "delete_row": lambda s, v: tables.delete_row(s),
    "add_column_before": lambda s, v: tables.add_column_before(s),
    "add_column_after": lambda s, v: tables.add_column_after(s),
    "delete_column": lambda s, v: tables.delete_column(s),
    "merge_cells": lambda s, v: tables.merge_cells_command(s, int(v) if v else 2),
    "split_cell": lambda s, v: tables.split_cell_command(s),
    "toggle_header_row": lambda s, v: tables.toggle_header_row(s),
    "delete_table": lambda s, v: tables.delete_table(s),
}


def _parse_caret(caret):
    if not caret or not caret.strip():
        return None
    try:
        return [int(step) for step in caret.split(",")]
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid caret: {caret}")


@app.post("/import")
@app.post("/api/import")  # Support both paths
async def import_template(
    text: str = Form(None),
    file: UploadFile = File(None)
):
    if not text and not file:
        raise HTTPException(status_code=400, detail="No template content provided")

    if text:
        content = text
    else:
        try:
            content = (await file.read()).decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="Template must be UTF-8 encoded")

    document = tplhtml.import_template(content)
    return {
        "html": tplhtml.render_internal(document),
        "document": document,
        "placeholders": tplhtml.count_placeholders(content),
    }


@app.post("/export")
@app.post("/api/export")
async def export_template(html: str = Form(...)):
    document = tplhtml.import_template(html)
    try:
        content = tplhtml.export_bytes(document)
    except tplhtml.TemplateEditorError as e:
        logger.error("Export failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=content,
        media_type=DEFAULT_CONFIG.EXPORT_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{DEFAULT_CONFIG.EXPORT_FILENAME}"'},
    )


@app.post("/api/table")
async def new_table(rows: int = Form(2), cols: int = Form(2)):
    if rows < 1 or cols < 1:
        raise HTTPException(status_code=400, detail="Table must be at least 1x1")
    table = tables.build_table(rows, cols)
    return {"html": tplhtml.render_internal(make_document([table]))}


@app.post("/api/command")
async def run_command(
    html: str = Form(...),
    command: str = Form(...),
    caret: str = Form(None),
    value: str = Form(None)
):
    handler = COMMANDS.get(command)
    if handler is None:
        raise HTTPException(status_code=400, detail=f"Unknown command: {command}")

    try:
        session = EditingSession.from_markup(html, caret=_parse_caret(caret))
        applied = handler(session, value)
    except (ValueError, TypeError, tplhtml.ContractViolation) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "html": session.render(),
        "caret": ",".join(str(step) for step in session.caret),
        "applied": bool(applied),
    }


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
