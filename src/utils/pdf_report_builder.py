# -*- coding: utf-8 -*-
"""PDF Report Builder for quiz analytics reports.

Builder-pattern class that assembles an HTML report (header, summary block,
data table, matplotlib charts) and converts it to PDF via xhtml2pdf.
"""
from __future__ import annotations

import os
import datetime


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_COLORS = {
    'navy': '#0f172a',
    'green': '#4caf50',
    'gray': '#64748b',
    'gray_light': '#f5f5f5',
    'white': '#ffffff',
    'text': '#1e293b',
    'text_light': '#475569',
    'border': '#dddddd',
}

_CHART_PALETTE = [
    '#2563eb', '#16a34a', '#ca8a04', '#dc2626', '#7c3aed',
    '#0891b2', '#db2777', '#ea580c', '#4f46e5', '#059669',
]


def _escape_html(text):
    """Escape HTML special characters."""
    if text is None:
        return ''
    return (
        str(text)
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
    )


def _build_css():
    """Build xhtml2pdf-compatible CSS stylesheet."""
    c = _COLORS
    # xhtml2pdf only supports basic CSS 2.1
    css = """
@page {
    size: A4 landscape;
    margin: 1.5cm;
}
body {
    font-family: Helvetica, Arial, sans-serif;
    font-size: 10pt;
    color: """ + c['text'] + """;
}
.header {
    text-align: center;
    border-bottom: 2px solid """ + c['navy'] + """;
    padding-bottom: 16px;
    margin-bottom: 16px;
}
.header h1 {
    font-size: 22pt;
    color: """ + c['navy'] + """;
    margin-bottom: 6px;
}
.header-meta {
    color: """ + c['text_light'] + """;
}
h2 {
    font-size: 14pt;
    color: """ + c['navy'] + """;
    margin-top: 16px;
    margin-bottom: 8px;
}
.summary {
    background-color: """ + c['gray_light'] + """;
    padding: 12px;
    margin: 12px 0;
}
.metric-row {
    padding: 3px 0;
}
.metric-label {
    color: """ + c['gray'] + """;
}
.metric-value {
    font-weight: bold;
}
table {
    width: 100%;
    border-collapse: collapse;
    margin: 12px 0;
}
th {
    background-color: """ + c['green'] + """;
    color: """ + c['white'] + """;
    padding: 6px;
    text-align: left;
    font-size: 9pt;
}
td {
    padding: 5px 6px;
    border: 1px solid """ + c['border'] + """;
    font-size: 9pt;
}
caption {
    font-weight: bold;
    text-align: left;
    padding-bottom: 4px;
}
.chart-container {
    text-align: center;
    margin: 16px 0;
}
.chart-container img {
    width: 520px;
}
"""
    return css


class PDFReportBuilder:
    """Builder-pattern class for constructing PDF reports."""

    def __init__(self, title, company_name=''):
        self._title = title
        self._company_name = company_name
        self._sections = []
        self._date_str = datetime.datetime.now().strftime('%Y-%m-%d')

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _fig_to_base64(fig):
        """Convert matplotlib figure to base64 PNG string."""
        import base64
        from io import BytesIO
        import matplotlib.pyplot as plt

        buf = BytesIO()
        fig.savefig(
            buf, format='png', dpi=150,
            bbox_inches='tight', facecolor='white',
        )
        buf.seek(0)
        img_b64 = base64.b64encode(buf.read()).decode('utf-8')
        buf.close()
        plt.close(fig)
        return img_b64

    def _chart_img_tag(self, b64):
        """Build an img tag from base64 data."""
        return (
            '<div class="chart-container">'
            '<img src="data:image/png;base64,{b64}" alt="chart">'
            '</div>'
        ).format(b64=b64)

    def _get_colors(self, n):
        """Return n colors from the palette."""
        return [_CHART_PALETTE[i % len(_CHART_PALETTE)] for i in range(n)]

    # ------------------------------------------------------------------
    # Content methods (builder pattern - each returns self)
    # ------------------------------------------------------------------
    def add_header(self, description, generated_at):
        """Add the title block with description and generation time."""
        self._date_str = generated_at or self._date_str
        company = ''
        if self._company_name:
            company = '{0} &mdash; '.format(_escape_html(self._company_name))
        html = (
            '<div class="header">'
            '<h1>{title}</h1>'
            '<p>{description}</p>'
            '<p class="header-meta">{company}Generated on: {date}</p>'
            '</div>'
        ).format(
            title=_escape_html(self._title),
            description=_escape_html(description),
            company=company,
            date=_escape_html(self._date_str),
        )
        self._sections.append({'type': 'raw', 'html': html})
        return self

    def add_heading(self, text):
        """Add a section heading."""
        html = '<h2>{0}</h2>'.format(_escape_html(text))
        self._sections.append({'type': 'raw', 'html': html})
        return self

    def add_paragraph(self, text):
        """Add a standalone paragraph."""
        html = '<p>{0}</p>'.format(_escape_html(text))
        self._sections.append({'type': 'raw', 'html': html})
        return self

    def add_metrics_summary(self, metrics, title='Summary'):
        """Render label/value pairs inside a shaded summary box."""
        parts = ['<div class="summary">', '<h2>{0}</h2>'.format(_escape_html(title))]
        for label, value in (metrics or {}).items():
            display_val = value if value is not None else 'N/A'
            parts.append(
                '<div class="metric-row">'
                '<span class="metric-label">{l}: </span>'
                '<span class="metric-value">{v}</span>'
                '</div>'.format(
                    v=_escape_html(str(display_val)),
                    l=_escape_html(str(label)),
                )
            )
        parts.append('</div>')
        self._sections.append({'type': 'raw', 'html': '\n'.join(parts)})
        return self

    def add_table(self, headers, rows, caption=''):
        """Add a styled data table; None cells render empty."""
        parts = ['<table>']
        if caption:
            parts.append('<caption>{0}</caption>'.format(_escape_html(caption)))
        hdr_cells = ''.join(
            '<th>{0}</th>'.format(_escape_html(str(h))) for h in headers
        )
        parts.append('<thead><tr>{0}</tr></thead>'.format(hdr_cells))
        parts.append('<tbody>')
        for row in (rows or []):
            cells = ''.join(
                '<td>{0}</td>'.format(_escape_html(v)) for v in row
            )
            parts.append('<tr>{0}</tr>'.format(cells))
        parts.append('</tbody></table>')
        self._sections.append({'type': 'raw', 'html': '\n'.join(parts)})
        return self

    # ------------------------------------------------------------------
    # Chart methods (lazy-import matplotlib)
    # ------------------------------------------------------------------
    def _import_plt(self):
        """Lazy-import matplotlib with Agg backend."""
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        return plt

    def add_bar_chart(self, labels, values, title, ylabel=''):
        """Add a vertical bar chart."""
        if not labels or not values:
            return self
        plt = self._import_plt()
        n = len(labels)
        fig, ax = plt.subplots(figsize=(8, 4.5))
        ax.bar(
            range(n), values, color=self._get_colors(n),
            width=0.6, edgecolor='white', linewidth=0.5,
        )
        ax.set_xticks(range(n))
        ax.set_xticklabels(
            [str(lb) for lb in labels], rotation=30, ha='right', fontsize=9,
        )
        ax.set_title(title, fontsize=13, fontweight='bold', pad=12)
        if ylabel:
            ax.set_ylabel(ylabel, fontsize=10)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        ax.grid(axis='y', alpha=0.3)
        fig.tight_layout()
        b64 = self._fig_to_base64(fig)
        self._sections.append({'type': 'raw', 'html': self._chart_img_tag(b64)})
        return self

    def add_line_chart(self, labels, values, title, ylabel=''):
        """Add a single-series line chart."""
        if not labels or not values:
            return self
        plt = self._import_plt()
        fig, ax = plt.subplots(figsize=(8, 4.5))
        points = [v if v is not None else float('nan') for v in values]
        ax.plot(
            range(len(points)), points, color=_CHART_PALETTE[0],
            marker='o', markersize=3, linewidth=1.5,
        )
        step = max(1, len(labels) // 12)
        ax.set_xticks(range(0, len(labels), step))
        ax.set_xticklabels(
            [str(lb) for lb in labels[::step]], rotation=30, ha='right', fontsize=8,
        )
        ax.set_title(title, fontsize=13, fontweight='bold', pad=12)
        if ylabel:
            ax.set_ylabel(ylabel, fontsize=10)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        ax.grid(alpha=0.3)
        fig.tight_layout()
        b64 = self._fig_to_base64(fig)
        self._sections.append({'type': 'raw', 'html': self._chart_img_tag(b64)})
        return self

    def add_pie_chart(self, labels, values, title):
        """Add a pie chart."""
        if not labels or not values:
            return self
        plt = self._import_plt()
        fig, ax = plt.subplots(figsize=(6, 5))
        ax.pie(
            values,
            labels=[str(lb) for lb in labels],
            colors=self._get_colors(len(labels)),
            autopct='%1.1f%%',
            startangle=90,
            wedgeprops={'edgecolor': 'white', 'linewidth': 1},
        )
        ax.set_title(title, fontsize=13, fontweight='bold', pad=12)
        ax.axis('equal')
        fig.tight_layout()
        b64 = self._fig_to_base64(fig)
        self._sections.append({'type': 'raw', 'html': self._chart_img_tag(b64)})
        return self

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def build_html(self):
        """Build the complete HTML document."""
        body_parts = [section.get('html', '') for section in self._sections]
        html = (
            '<!DOCTYPE html>\n'
            '<html lang="en">\n'
            '<head>\n'
            '<meta charset="utf-8">\n'
            '<title>{title}</title>\n'
            '<style>{css}</style>\n'
            '</head>\n'
            '<body>\n'
            '{body}\n'
            '</body>\n'
            '</html>'
        ).format(
            title=_escape_html(self._title),
            css=_build_css(),
            body='\n'.join(body_parts),
        )
        return html

    def build_pdf(self, filepath):
        """Build PDF and save to filepath. Returns the file path."""
        from xhtml2pdf import pisa

        html_content = self.build_html()
        dirpath = os.path.dirname(filepath)
        if dirpath:
            os.makedirs(dirpath, exist_ok=True)

        with open(filepath, 'wb') as pdf_file:
            result = pisa.CreatePDF(html_content, dest=pdf_file)
        if result.err:
            raise RuntimeError('xhtml2pdf conversion had errors')
        return filepath
