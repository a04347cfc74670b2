from __future__ import annotations
import argparse
import logging
from flask import Flask, request, jsonify, Response
from snowball.engine import Engine
from snowball.errors import SnowballError
from snowball.models import GenerationConfig, parse_sources
from snowball import config as CFG

log = logging.getLogger(__name__)

app = Flask(__name__)
_engine: Engine | None = None


def _int_arg(name: str, default):
    raw = request.args.get(name, "", type=str).strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise SnowballError(f"{name} must be an integer, got {raw!r}") from None


def _config_from_request() -> GenerationConfig:
    n = _int_arg("n", 20)
    if n > CFG.WEB_MAX_POEMS:
        n = CFG.WEB_MAX_POEMS
    return GenerationConfig(
        poem_target=n,
        failure_max=_int_arg("failures", max(n * 10, 1000)),
        multi_key_percentage=_int_arg("percent", CFG.MULTI_KEY_PERCENTAGE),
        min_key_size=_int_arg("min_key", CFG.MIN_KEY_SIZE),
        word_begin=_int_arg("begin", CFG.WORD_BEGIN),
        word_end=_int_arg("end", None),
        excluded_chars=request.args.get("exclude", "", type=str),
        excluded_min_length=_int_arg("exclude_min", 0),
    )


# ---------- API ----------
@app.get("/health")
def health():
    ready = _engine is not None and _engine.index is not None
    body = {"status": "ok" if ready else "not ready"}
    if ready:
        body["tables"] = _engine.index.stats()  # type: ignore
    return jsonify(body), (200 if ready else 503)


@app.get("/api/generate")
def api_generate():
    if _engine is None or _engine.index is None:
        return jsonify({"error": "engine not initialized"}), 503
    try:
        cfg = _config_from_request()
        phrase = request.args.get("seed_phrase", "", type=str).strip()
        seed = _int_arg("seed", None)
        result = _engine.generate(cfg, [phrase] if phrase else None, seed=seed)[0]
    except SnowballError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(result.as_dict())


# ---------- UI ----------
@app.get("/")
def home():
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Snowball Poems</title>
<style>
:root{
  --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6;
  --accent:#6ee7ff; --border:#1c2530;
}
*{box-sizing:border-box}
body{
  margin:0; background:var(--bg); color:var(--ink);
  font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,Arial;
}
.container{ max-width:880px; margin:24px auto; padding:0 16px }
.card{ background:var(--panel); border:1px solid var(--border); border-radius:16px; padding:18px }
h1{ font-size:20px; margin:0 0 10px 0 }
.grid{ display:grid; grid-template-columns:repeat(4,1fr); gap:10px }
label{ display:flex; flex-direction:column; font-size:12px; color:var(--muted); gap:4px }
input{
  padding:8px 10px; border-radius:10px; border:1px solid var(--border);
  background:#0b1117; color:var(--ink); font-size:15px;
}
.wide{ grid-column:span 2 }
.btn{
  margin-top:12px; padding:10px 14px; border-radius:10px; border:1px solid var(--border);
  background:#0b1117; color:var(--ink); cursor:pointer;
}
.btn:hover{ border-color:var(--accent) }
#stats{ color:var(--muted); font-size:13px; margin-top:10px }
#err{ color:#ffb0b0; margin-top:10px }
#out{
  margin-top:14px; padding:12px 14px; border:1px solid var(--border); border-radius:12px;
  white-space:pre-wrap; font-family:ui-monospace,Menlo,Consolas,monospace; min-height:6em;
}
</style>
</head>
<body>
  <div class="container">
    <div class="card">
      <h1>Snowball Poems</h1>
      <div class="grid">
        <label class="wide">Seed phrase <input id="seed_phrase" placeholder="e.g. the only" /></label>
        <label>Poems <input id="n" type="number" min="1" max="500" value="20" /></label>
        <label>Random seed <input id="seed" type="number" /></label>
        <label>Begin length <input id="begin" type="number" min="1" value="1" /></label>
        <label>End length <input id="end" type="number" min="1" /></label>
        <label>Multi-key % <input id="percent" type="number" min="0" max="100" value="70" /></label>
        <label>Min key size <input id="min_key" type="number" min="0" max="10" value="1" /></label>
        <label class="wide">Exclude letters <input id="exclude" placeholder="e.g. e" /></label>
        <label>Exclude from length <input id="exclude_min" type="number" min="0" value="0" /></label>
      </div>
      <button id="go" class="btn">Generate</button>
      <div id="stats">Ready.</div>
      <div id="err"></div>
      <div id="out"></div>
    </div>
  </div>
<script>
const ids = ["seed_phrase","n","seed","begin","end","percent","min_key","exclude","exclude_min"];
const $ = (id) => document.getElementById(id);
async function generate(){
  const qs = new URLSearchParams();
  for(const id of ids){ const v = $(id).value.trim(); if(v) qs.set(id, v); }
  $("err").textContent = "";
  $("stats").textContent = "Generating...";
  try{
    const resp = await fetch(`/api/generate?${qs}`);
    const data = await resp.json();
    if(!resp.ok) throw new Error(data.error || `HTTP ${resp.status}`);
    $("out").textContent = data.poems.join("\n");
    $("stats").textContent = `Poems: ${data.successes}/${data.target} | discarded: ${data.failures}`
      + (data.exhausted ? " | gave up" : "");
  }catch(e){
    $("err").textContent = `Error: ${e.message ?? e}`;
    $("stats").textContent = "Error.";
  }
}
$("go").addEventListener("click", generate);
window.addEventListener("keydown", (ev)=>{ if(ev.key === "Enter") generate(); });
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run the snowball poem Flask UI")
    mode = ap.add_mutually_exclusive_group(required=True)
    mode.add_argument("--build", action="store_true")
    mode.add_argument("--load", action="store_true")
    ap.add_argument("--corpus", nargs="+", default=[], metavar="PATH[:WEIGHT]")
    ap.add_argument("--cache", default=None)
    ap.add_argument("--host", default=CFG.WEB_HOST)
    ap.add_argument("--port", type=int, default=CFG.WEB_PORT)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    global _engine
    _engine = Engine()
    if args.build:
        if not args.corpus:
            ap.error("--build requires --corpus")
        _engine.build(parse_sources(args.corpus), cache=args.cache, verbose=args.verbose)
    else:
        _engine.load(cache=args.cache, verbose=args.verbose)

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
