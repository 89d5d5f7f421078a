"""
Task Downloader – Web UI (Flask)

Routes:
  GET  /            page listing tasks, with add-task / add-file / stop buttons
  GET  /tasks       tasks as JSON
  POST /task        create a task
  POST /task/<n>    oper=add&url=...  download url into task n
                    oper=del          recognised but not supported
  POST /stop        drain downloads, remove the storage dir, stop the server
"""
import logging

from flask import Flask, abort, jsonify, request

from .errors import (
    InvalidRequest,
    MethodNotAllowed,
    TaskDownloaderError,
    UnsupportedOperation,
)
from .registry import TaskRegistry
from .shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)


def _error(exc: TaskDownloaderError):
    return jsonify({"ok": False, "error": str(exc)}), exc.http_status


def _params() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def create_app(registry: TaskRegistry, coordinator: ShutdownCoordinator) -> Flask:
    app = Flask(__name__)

    @app.errorhandler(TaskDownloaderError)
    def handle_error(exc):
        return _error(exc)

    @app.errorhandler(404)
    def not_found(_exc):
        return jsonify({"ok": False, "error": "Resource not found"}), 404

    @app.errorhandler(405)
    def wrong_method(_exc):
        return _error(MethodNotAllowed(f"the {request.method} method is not used"))

    # ---------- Routes ----------
    @app.get("/")
    def index():
        return INDEX_HTML, 200, {"Content-Type": "text/html; charset=utf-8"}

    @app.get("/tasks")
    def list_tasks():
        return jsonify({
            "ok": True,
            "stopping": coordinator.stopping,
            "tasks": [t.to_dict() for t in registry.list_tasks()],
        })

    @app.post("/task", strict_slashes=False)
    def new_task():
        number = registry.create_task()
        return jsonify({"ok": True, "task": number}), 201

    @app.post("/task/<number>", strict_slashes=False)
    def task_operation(number):
        # task numbers are matched as written, "01" is not task "1"
        if not number.isdigit():
            abort(404)
        data = _params()
        oper = data.get("oper")
        if not isinstance(oper, str):
            raise InvalidRequest()
        oper = oper.strip()
        if oper == "add":
            obj = registry.attach_object(number, data.get("url"))
            return jsonify({"ok": True, "task": number, "object": obj.to_dict()}), 201
        if oper == "del":
            raise UnsupportedOperation()
        raise InvalidRequest()

    @app.post("/stop", strict_slashes=False)
    def stop():
        if coordinator.request_stop():
            message = "The server will be stopped. Goodbye"
        else:
            message = "The server is already stopping"
        return jsonify({"ok": True, "message": message}), 202

    return app


# ---------- Minimal UI (HTML + JS) ----------
INDEX_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Task Downloader</title>
  <style>
    :root { --bg:#0f1220; --card:#171a2b; --text:#e7e9ff; --muted:#a8b0c6; --accent:#7c9cff; --err:#ff6b6b; }
    *{box-sizing:border-box} body{margin:0;background:var(--bg);color:var(--text);font:14px/1.45 system-ui,Segoe UI,Roboto,Inter,Arial}
    header{padding:18px 20px;border-bottom:1px solid #242842;background:#131626}
    h1{margin:0;font-size:18px;letter-spacing:.6px}
    main{max-width:1000px;margin:18px auto;padding:0 16px;display:grid;gap:16px}
    .card{background:var(--card);border:1px solid #23273a;border-radius:14px;padding:14px}
    input{background:#0f1220;border:1px solid #2a2f47;border-radius:10px;color:var(--text);padding:8px;flex:1}
    .row{display:flex;gap:8px;align-items:center;margin-top:8px}
    button{background:#1c2140;color:var(--text);border:1px solid #2a2f47;border-radius:10px;padding:8px 12px;cursor:pointer}
    button.primary{background:var(--accent);color:#0a0d1c;border-color:#6b85ff}
    button.danger{background:#3a1c24;border-color:#6b2a39;color:#ffdfe3}
    .muted{color:var(--muted)} .mono{font-family:SFMono-Regular,Consolas,Monaco,monospace;font-size:12px}
  </style>
</head>
<body>
  <header><h1>TASK DOWNLOADER</h1></header>
  <main>
    <section class="card">
      <div class="row">
        <button id="newTask" class="primary">New task</button>
        <button id="stop" class="danger">Stop server</button>
      </div>
      <div id="status" class="mono muted" style="margin-top:8px"></div>
    </section>
    <section id="tasks"></section>
  </main>

  <script>
  function el(tag, cls, text){ const e=document.createElement(tag); if(cls) e.className=cls; if(text) e.textContent=text; return e; }
  function setStatus(msg){ document.getElementById('status').textContent = msg || ''; }

  async function post(url, body){
    const res = await fetch(url, {
      method:'POST',
      headers:{'Content-Type':'application/json'},
      body: JSON.stringify(body||{})
    });
    const j = await res.json().catch(()=>({}));
    setStatus(j.error || j.message || (res.ok ? 'OK' : 'Failed'));
    await refresh();
  }

  function renderTask(t){
    const card = el('div','card');
    card.appendChild(el('div','', `Task ${t.number}`));
    for(const o of t.objects){
      card.appendChild(el('div','mono muted', `${o.name}  <-  ${o.url}`));
    }
    const row = el('div','row');
    const input = el('input'); input.placeholder = 'https://host/document.pdf';
    const add = el('button','', 'Add file');
    add.onclick = () => post(`/task/${t.number}`, {oper:'add', url:input.value});
    row.append(input, add);
    card.appendChild(row);
    return card;
  }

  async function refresh(){
    const res = await fetch('/tasks');
    if(!res.ok) return;
    const j = await res.json();
    const box = document.getElementById('tasks');
    box.innerHTML = '';
    for(const t of j.tasks) box.appendChild(renderTask(t));
    if(j.stopping) setStatus('Stopping… letting active downloads finish');
  }

  document.getElementById('newTask').onclick = () => post('/task');
  document.getElementById('stop').onclick = () => post('/stop');
  refresh();
  </script>
</body>
</html>
"""
