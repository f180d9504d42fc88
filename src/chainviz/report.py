from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Any, Dict

from jinja2 import Template

logger = logging.getLogger(__name__)


_REPORT_TEMPLATE = Template(
    """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>chainviz report</title>
  <style>
    body { font-family: Arial, Helvetica, sans-serif; margin: 24px; }
    code { background: #f6f8fa; padding: 2px 4px; border-radius: 4px; }
    table { border-collapse: collapse; margin-top: 0.6em; }
    th, td { border: 1px solid #ddd; padding: 8px; }
    th { background: #f2f2f2; text-align: left; }
    .grid { display: grid; grid-template-columns: 1fr 1fr 1fr; gap: 16px; }
    .card { border: 1px solid #ddd; border-radius: 8px; padding: 12px; }
    .small { color: #666; font-size: 0.9em; }
    .considered { color: #2a7d2a; }
    .rejected { color: #b22222; }
    img { max-width: 100%; height: auto; border: 1px solid #eee; border-radius: 6px; }
  </style>
</head>
<body>

<h1>chainviz report</h1>
<p class="small">Generated: {{ generated_at }}</p>

<h2>Run summary</h2>
<table>
  <tr><th>Trace</th><td><code>{{ trace_path }}</code></td></tr>
  <tr><th>Mode</th><td>{{ mode }}</td></tr>
  <tr><th>Reads plotted</th><td>{{ counts.reads }}</td></tr>
  <tr><th>Chains</th><td>{{ counts.chains }}</td></tr>
  <tr><th>Plots written</th><td>{{ counts.plots_written }}</td></tr>
  <tr><th>Plots failed</th><td>{{ counts.plots_failed }}</td></tr>
</table>

{% for read in reads %}
<h2>{{ read.name }}</h2>
{% if read.plots %}
<div class="grid">
  {% for p in read.plots %}
  <div class="card">
    <h3>Chain {{ p.rank }}
      <span class="{{ 'considered' if p.considered == 'considered' else 'rejected' }}">({{ p.considered }})</span>
    </h3>
    <p class="small">Score {{ '%.2f'|format(p.score) }}</p>
    <a href="{{ p.file }}"><img src="{{ p.file }}" alt="chain {{ p.rank }}"></a>
  </div>
  {% endfor %}
</div>
{% else %}
<p class="small">No plots were written for this read.</p>
{% endif %}
{% endfor %}

<hr>
<p class="small">chainviz {{ version }}</p>
</body>
</html>""",
    autoescape=True,
)


def render_report(
    *,
    outdir: str | Path,
    version: str,
    trace_path: str,
    mode: str,
    summary: Dict[str, Any],
) -> Path:
    """Write ``report.html`` linking every chain plot listed in ``summary``."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    html = _REPORT_TEMPLATE.render(
        generated_at=_dt.datetime.now().isoformat(timespec="seconds"),
        version=version,
        trace_path=trace_path,
        mode=mode,
        counts=summary.get("counts", {}),
        reads=summary.get("reads", []),
    )

    out_path = outdir / "report.html"
    out_path.write_text(html, encoding="utf-8")
    logger.info("Report written: %s", out_path)
    return out_path
