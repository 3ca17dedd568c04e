from __future__ import annotations

import json
from pathlib import Path

from task_tracker.lib.types import STAGES


def render_index(root_dir: Path) -> str:
    stage_options = json.dumps([s.value for s in STAGES])
    return (
        _PAGE.replace("__GUI_DIR__", json.dumps(str(root_dir)).replace("</", "<\\/"))
        .replace("__STAGES__", stage_options)
    )


_PAGE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Task Tracker</title>
  <style>
    :root {
      --bg: #f6f4ef;
      --panel: #fffdf8;
      --ink: #1d2a33;
      --muted: #6b7780;
      --accent: #0f8b8d;
      --line: #ddd6c8;
      --warn: #b00020;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      font-family: system-ui, sans-serif;
      color: var(--ink);
      background: var(--bg);
    }
    header {
      padding: 16px 24px;
      border-bottom: 1px solid var(--line);
      display: flex;
      gap: 12px;
      align-items: center;
    }
    header h1 { font-size: 20px; margin: 0; flex: 1; }
    main { padding: 16px 24px; display: grid; gap: 16px; }
    section {
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 8px;
      padding: 12px 16px;
    }
    section h2 { font-size: 16px; margin: 0 0 8px; }
    .path { color: var(--muted); font-size: 12px; font-family: monospace; }
    table { width: 100%; border-collapse: collapse; }
    td { padding: 4px 6px; border-top: 1px solid var(--line); vertical-align: middle; }
    td.id { font-family: monospace; width: 7em; }
    tr.done td.desc { color: var(--muted); text-decoration: line-through; }
    form.add { display: flex; gap: 6px; margin-top: 8px; }
    form.add input { flex: 1; }
    button { cursor: pointer; }
    button.danger { color: var(--warn); }
    .error { color: var(--warn); }
  </style>
</head>
<body>
  <header>
    <h1>Task Tracker</h1>
    <label><input type="checkbox" id="show-all"> show done</label>
    <button id="refresh">Refresh</button>
  </header>
  <main id="stores"></main>
  <script>
    const GUI_DIR = __GUI_DIR__;
    const STAGES = __STAGES__;
    const storesEl = document.getElementById("stores");
    const showAll = document.getElementById("show-all");

    async function api(method, url, body) {
      const opts = { method, headers: { "Content-Type": "application/json" } };
      if (body !== undefined) opts.body = JSON.stringify(body);
      const res = await fetch(url, opts);
      const data = await res.json();
      if (!res.ok) throw new Error(data.error || res.statusText);
      return data;
    }

    function el(tag, attrs = {}, children = []) {
      const node = document.createElement(tag);
      for (const [k, v] of Object.entries(attrs)) {
        if (k.startsWith("on")) node.addEventListener(k.slice(2), v);
        else node.setAttribute(k, v);
      }
      for (const c of children) node.append(c);
      return node;
    }

    function renderStore(store) {
      const tasks = store.tasks.filter(t => showAll.checked || t.stage !== "done");
      const rows = tasks.map(t => {
        const select = el("select", {
          onchange: async e => {
            await api("PUT", `/api/tasks/${t.id}`, { stage: e.target.value, dir: store.dir });
            load();
          },
        }, STAGES.map(s => {
          const opt = el("option", { value: s }, [s]);
          if (s === t.stage) opt.selected = true;
          return opt;
        }));
        const remove = el("button", {
          class: "danger",
          onclick: async () => {
            if (!confirm(`Remove ${t.id}?`)) return;
            await api("DELETE", `/api/tasks/${t.id}?dir=${encodeURIComponent(store.dir)}`);
            load();
          },
        }, ["remove"]);
        return el("tr", { class: t.stage === "done" ? "done" : "" }, [
          el("td", { class: "id" }, [t.id]),
          el("td", {}, [select]),
          el("td", { class: "desc" }, [t.description + (t.repo ? ` [${t.repo}]` : "")]),
          el("td", {}, [remove]),
        ]);
      });

      const input = el("input", { placeholder: "New task", required: "" });
      const form = el("form", {
        class: "add",
        onsubmit: async e => {
          e.preventDefault();
          await api("POST", "/api/tasks", { description: input.value, dir: store.dir });
          load();
        },
      }, [input, el("button", { type: "submit" }, ["Add"])]);

      const purge = el("button", {
        onclick: async () => {
          const preview = await api("POST", "/api/tasks/purge", { dir: store.dir, dryRun: true });
          if (!preview.count || !confirm(`Purge ${preview.count} done task(s)?`)) return;
          await api("POST", "/api/tasks/purge", { dir: store.dir });
          load();
        },
      }, ["Purge done"]);

      return el("section", {}, [
        el("h2", {}, [store.name, " ", purge]),
        el("div", { class: "path" }, [store.path]),
        el("table", {}, rows.length ? rows : [el("tr", {}, [el("td", {}, ["No tasks."])])]),
        form,
      ]);
    }

    async function load() {
      try {
        const data = await api("GET", `/api/tasks?dir=${encodeURIComponent(GUI_DIR)}`);
        const stores = (data.root ? [data.root] : []).concat(data.repos);
        storesEl.replaceChildren(...stores.map(renderStore));
        if (!stores.length) {
          storesEl.replaceChildren(el("p", {}, [`No task stores found under ${GUI_DIR}`]));
        }
      } catch (err) {
        storesEl.replaceChildren(el("p", { class: "error" }, [err.message]));
      }
    }

    showAll.addEventListener("change", load);
    document.getElementById("refresh").addEventListener("click", load);
    load();
  </script>
</body>
</html>
"""
