from collections.abc import Mapping, Sequence
from html import escape

from pydantic import BaseModel

_CELL = "padding: 10px; border: 1px solid #ddd;"
_HIGHLIGHT_BACKGROUND = "#FFF3CD"
RANKING_COLOR = "#28a745"


class EmailLayout(BaseModel):
    organization_name: str
    primary_color: str
    contact_email: str


class TableRow(BaseModel):
    cells: list[str | int]
    highlighted: bool = False


def substitute_tokens(text: str, values: Mapping[str, object]) -> str:
    for key, value in values.items():
        text = text.replace("{" + key + "}", str(value))
    return text


def render_template(text: str, values: Mapping[str, object]) -> str:
    """
    Substitute `{token}` placeholders in operator-written text and turn it into HTML.
    Both the text and the values are escaped; unknown tokens are left untouched.
    """
    rendered = escape(text)
    for key, value in values.items():
        rendered = rendered.replace("{" + key + "}", escape(str(value)))
    return rendered.replace("\n", "<br>")


def format_moyenne(points: int, reprises: int) -> str:
    if reprises <= 0:
        return "-"
    return f"{points / reprises:.3f}"


def render_table(headers: Sequence[str], rows: Sequence[TableRow], header_color: str) -> str:
    header_html = "".join(
        f'<th style="{_CELL} color: white;">{escape(header)}</th>' for header in headers
    )
    rows_html = []
    for index, row in enumerate(rows):
        if row.highlighted:
            background = _HIGHLIGHT_BACKGROUND
        else:
            background = "#f8f9fa" if index % 2 == 1 else "white"
        weight = "bold" if row.highlighted else "normal"
        cells = "".join(
            f'<td style="{_CELL} font-weight: {weight};">{escape(str(cell))}</td>'
            for cell in row.cells
        )
        rows_html.append(f'<tr style="background: {background};">{cells}</tr>')

    return (
        '<table style="width: 100%; border-collapse: collapse; margin: 20px 0; font-size: 14px;">'
        f'<thead><tr style="background: {header_color};">{header_html}</tr></thead>'
        f"<tbody>{''.join(rows_html)}</tbody>"
        "</table>"
    )


def qualification_message(qualified: bool, definitive: bool) -> str:
    """After the third tournament the selection is final, before it only provisional."""
    if definitive and qualified:
        style, text = (
            "background: #d4edda; border-left: 4px solid #28a745; color: #155724;",
            "Félicitations ! Vous êtes sélectionné(e) pour la finale départementale !",
        )
    elif definitive:
        style, text = (
            "background: #f8d7da; border-left: 4px solid #dc3545; color: #721c24;",
            "Malheureusement, vous n'êtes pas sélectionné(e) pour la finale départementale.",
        )
    elif qualified:
        style, text = (
            "background: #d4edda; border-left: 4px solid #28a745; color: #155724;",
            "Vous êtes à ce stade de la compétition éligible pour la finale départementale.",
        )
    else:
        style, text = (
            "background: #fff3cd; border-left: 4px solid #ffc107; color: #856404;",
            "Malheureusement, vous n'êtes pas, à ce stade de la compétition, "
            "éligible pour la finale départementale.",
        )
    return f'<p style="margin-top: 20px; padding: 15px; {style}"><strong>{escape(text)}</strong></p>'


def render_layout(layout: EmailLayout, title: str, subtitle: str, body_html: str) -> str:
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 700px; margin: 0 auto;">
  <div style="background: {layout.primary_color}; color: white; padding: 20px; text-align: center;">
    <h1 style="margin: 0; font-size: 24px;">{escape(title)}</h1>
    <p style="margin: 10px 0 0 0; opacity: 0.9;">{escape(subtitle)}</p>
  </div>
  <div style="padding: 20px; background: #f8f9fa; line-height: 1.6;">
    {body_html}
  </div>
  <div style="background: {layout.primary_color}; color: white; padding: 10px; text-align: center; font-size: 12px;">
    <p style="margin: 0;">{escape(layout.organization_name)} - {escape(layout.contact_email)}</p>
  </div>
</div>
"""


def render_results_email(
    layout: EmailLayout,
    *,
    title: str,
    subtitle: str,
    intro_html: str,
    outro_html: str,
    results_table: str,
    rankings_heading: str,
    rankings_table: str,
    qualification_html: str,
) -> str:
    body = (
        f"<p>{intro_html}</p>"
        f'<h3 style="color: {layout.primary_color}; margin-top: 30px;">Résultats du tournoi</h3>'
        f"{results_table}"
        '<p style="margin-top: 30px; font-style: italic; color: #555;">'
        "Après les rencontres ci-dessus, le classement général pour la finale départementale "
        "est le suivant :</p>"
        f'<h3 style="color: {RANKING_COLOR}; margin-top: 15px;">{escape(rankings_heading)}</h3>'
        f"{rankings_table}"
        f"{qualification_html}"
        f'<p style="margin-top: 30px;">{outro_html}</p>'
    )
    return render_layout(layout, title, subtitle, body)


def render_summary_email(
    layout: EmailLayout,
    *,
    title: str,
    subtitle: str,
    sent: Sequence[tuple[str, str]],
    failed_count: int,
    skipped_count: int,
) -> str:
    recipients_table = render_table(
        ["#", "Joueur", "Email"],
        [TableRow(cells=[index + 1, name, email]) for index, (name, email) in enumerate(sent)],
        layout.primary_color,
    )
    body = (
        '<div style="background: #d4edda; border-left: 4px solid #28a745; padding: 15px;">'
        f"<strong>{len(sent)} email(s) envoyé(s)</strong><br>"
        f"{failed_count} échec(s), {skipped_count} ignoré(s)"
        "</div>"
        f'<h3 style="color: {layout.primary_color};">Destinataires ({len(sent)})</h3>'
        f"{recipients_table}"
    )
    return render_layout(layout, title, subtitle, body)


def render_finalist_email(
    layout: EmailLayout,
    *,
    title: str,
    subtitle: str,
    intro_html: str,
    outro_html: str,
    finalists_table: str,
) -> str:
    body = (
        f"<p>{intro_html}</p>"
        f'<h3 style="color: {RANKING_COLOR}; margin-top: 30px;">Joueurs qualifiés</h3>'
        f"{finalists_table}"
        f'<p style="margin-top: 30px;">{outro_html}</p>'
    )
    return render_layout(layout, title, subtitle, body)
