from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from . import config
from .engine.customization import READ_ONLY, Capabilities
from .engine.document import DesignDocument
from .engine.fonts import FontRegistry, google_fonts_downloader
from .engine.navigation import View
from .engine.session import CardSession
from .errors import MalformedDocument, ReadOnlyStore, UnknownZone, ZoneOverflow
from .models import reset_engine
from .pipeline.ingest import fetch_document, load_document
from .pipeline.render_pdf import render_proof
from .pipeline.render_preview import render_previews
from .storage import SqlDraftStore

app = typer.Typer(help="Greeting card personalisation engine")


def _configure(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


def _load(sku: str, template: Optional[Path], api: Optional[str]) -> DesignDocument:
    try:
        if template:
            return load_document(template, sku=sku)
        return fetch_document(sku, base_url=api)
    except MalformedDocument as exc:
        typer.echo(f"Template {sku} not found/unavailable: {exc}", err=True)
        raise typer.Exit(code=1)


def _session(
    sku: str,
    template: Optional[Path],
    api: Optional[str],
    readonly: bool = False,
    fetch_fonts: bool = False,
    width: float = 0.0,
) -> CardSession:
    document = _load(sku, template, api)
    fonts = FontRegistry(downloader=google_fonts_downloader if fetch_fonts else None)
    session = CardSession(
        document,
        capabilities=READ_ONLY if readonly else Capabilities(),
        drafts=SqlDraftStore(),
        fonts=fonts,
        container_width=width,
    )
    session.load_fonts()
    return session


TemplateOption = typer.Option(None, "--template", help="Template JSON file instead of the API")
ApiOption = typer.Option(None, "--api", help="Admin API base URL")
OutOption = typer.Option(None, "--out", help="Output directory")


@app.command()
def show(
    sku: str,
    template: Optional[Path] = TemplateOption,
    api: Optional[str] = ApiOption,
    out: Optional[Path] = OutOption,
    view: View = typer.Option(View.FRONT, "--view", help="front, inner or back"),
    width: float = typer.Option(0.0, "--width", help="Container width in px"),
) -> None:
    _configure(out)
    with _session(sku, template, api, readonly=True, width=width) as session:
        if view != View.FRONT:
            session.go(View.INNER)
        session.go(view)
        layout = session.layout
        typer.echo(f"{session.document.title or sku} [{layout.view.value}] k={layout.k:.3f}")
        for face in layout.faces:
            typer.echo(f"  {face.name}")
            for item in face.dynamic_items:
                flag = " (clipped)" if item.clipped else ""
                typer.echo(f"    {item.zone_id}: {item.fit.size}px {item.font_family}{flag} {item.text!r}")


@app.command()
def edit(
    sku: str,
    zone_id: str,
    text: str,
    template: Optional[Path] = TemplateOption,
    api: Optional[str] = ApiOption,
    out: Optional[Path] = OutOption,
) -> None:
    _configure(out)
    with _session(sku, template, api) as session:
        try:
            accepted = session.set_text(zone_id, text)
        except UnknownZone as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)
        if not accepted:
            typer.echo("Refused: text is longer than the zone allows")
            raise typer.Exit(code=2)
        typer.echo(f"Saved {zone_id} for {sku}")
        try:
            session.zone_item(zone_id).fit.raise_for_overflow(zone_id)
        except ZoneOverflow as exc:
            typer.echo(f"Warning: {exc}; the text will be clipped")


@app.command()
def style(
    sku: str,
    zone_id: str,
    font: Optional[str] = typer.Option(None, "--font", help="Font family override"),
    color: Optional[str] = typer.Option(None, "--color", help="Colour override"),
    template: Optional[Path] = TemplateOption,
    api: Optional[str] = ApiOption,
    out: Optional[Path] = OutOption,
    fetch_fonts: bool = typer.Option(False, "--fetch-fonts", help="Download missing fonts"),
) -> None:
    _configure(out)
    partial = {key: value for key, value in (("fontFamily", font), ("color", color)) if value is not None}
    if not partial:
        typer.echo("Nothing to change")
        return
    with _session(sku, template, api, fetch_fonts=fetch_fonts) as session:
        try:
            session.set_style(zone_id, partial)
        except (UnknownZone, ReadOnlyStore) as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Saved style for {zone_id}: {dict(session.store.style(zone_id))}")
        family = session.store.style(zone_id).get("fontFamily")
        session.load_fonts()
        if family and not session.fonts.is_available(family):
            typer.echo(f"Font {family} unavailable; using {session.fonts.resolve(family).family}")


@app.command()
def render(
    sku: str,
    template: Optional[Path] = TemplateOption,
    api: Optional[str] = ApiOption,
    out: Optional[Path] = OutOption,
    previews: bool = typer.Option(True, "--previews/--no-previews", help="Also write PNG previews"),
    fetch_fonts: bool = typer.Option(False, "--fetch-fonts", help="Download missing fonts"),
) -> None:
    _configure(out)
    with _session(sku, template, api, readonly=True, fetch_fonts=fetch_fonts) as session:
        proof = render_proof(session)
    typer.echo(f"Proof: {proof}")
    if previews:
        for path in render_previews(sku, proof):
            typer.echo(f"Preview: {path}")


@app.command()
def reset(
    sku: str,
    out: Optional[Path] = OutOption,
) -> None:
    _configure(out)
    SqlDraftStore().delete(sku)
    typer.echo(f"Draft for {sku} cleared")


if __name__ == "__main__":
    app()
