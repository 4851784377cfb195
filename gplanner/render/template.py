# gplanner/render/template.py
from __future__ import annotations

CSS_BLOCK = r"""
body { margin: 0; font-family: system-ui, sans-serif; background: #f8fafc; color: #0f172a; }
main { display: flex; flex-wrap: wrap; gap: 24px; padding: 24px; }
.gp-map { background: #ffffff; border-radius: 12px; box-shadow: 0 1px 3px rgba(15, 23, 42, .15); }
.gp-region-label { font-size: 12px; fill: #334155; }
.gp-legend { min-width: 220px; }
.gp-legend li { list-style: none; margin: 4px 0; display: flex; align-items: center; gap: 8px; }
.gp-swatch { width: 12px; height: 12px; border-radius: 50%; display: inline-block; }
"""

HTML_SHELL = r"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>__TITLE__</title>
<style>
__CSS_BLOCK__
</style>
</head>
<body>
<main>
__SVG_MARKUP__
__LEGEND_MARKUP__
</main>
<script id="gp-data" type="application/json">
__DATA_JSON__
</script>
</body>
</html>
"""

HTML_TEMPLATE = HTML_SHELL.replace("__CSS_BLOCK__", CSS_BLOCK)
