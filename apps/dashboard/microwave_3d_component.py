from __future__ import annotations

import json
import math
from typing import Any

import streamlit.components.v1 as components

FRAME_STORAGE_KEY = "microwave.scene3d.frame.v1"
_STATES = ("idle", "running", "opened", "ended")


def _safe_float(value: object, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _frame_payload(frame: dict[str, Any]) -> dict[str, Any]:
    state = str(frame.get("state", "idle"))
    if state not in _STATES:
        state = "idle"
    remaining_ms = max(0, int(_safe_float(frame.get("remaining_ms", 0), 0.0)))
    rotation = _safe_float(frame.get("food_rotation_rad", 0.0), 0.0)
    if rotation != rotation:
        rotation = 0.0

    return {
        "frame_seq": str(frame.get("frame_seq", f"{state}:{remaining_ms}")),
        "state": state,
        "remaining_ms": remaining_ms,
        "display_text": str(frame.get("display_text", "00:00.000")),
        "door_open": bool(frame.get("door_open", False)),
        "light_on": bool(frame.get("light_on", False)),
        "is_cooking": bool(frame.get("is_cooking", False)),
        "ended": bool(frame.get("ended", False)),
        "food_rotation_rad": math.fmod(rotation, 2.0 * math.pi),
        "food_spin_rad_per_ms": max(
            0.0, _safe_float(frame.get("food_spin_rad_per_ms", 0.0), 0.0)
        ),
    }


def publish_frame(frame: dict[str, Any]) -> None:
    """Hand the latest frame to an already mounted scene without remounting it."""
    payload_json = json.dumps(_frame_payload(frame))
    update_channel_html = f"""
<script>
try {{
  const frame = {payload_json};
  window.localStorage.setItem("{FRAME_STORAGE_KEY}", JSON.stringify(frame));
  if (window.parent) {{
    window.parent.__microwaveScene3DLatestFrame = frame;
  }}
}} catch (err) {{
  // ignore channel update errors
}}
</script>
"""
    components.html(update_channel_html, height=0, scrolling=False)


def render_microwave_3d(frame: dict[str, Any], height: int = 520) -> None:
    publish_frame(frame)

    html_template = """
<div id="microwave-scene3d-root" style="width:100%;height:__HEIGHT__px;position:relative;background:#f0e6d6;overflow:hidden;"></div>
<script src="https://cdn.jsdelivr.net/npm/three@0.159.0/build/three.min.js"></script>
<script src="https://cdn.jsdelivr.net/npm/three@0.159.0/examples/js/controls/OrbitControls.js"></script>
<script>
(function () {
  const CONTAINER_ID = "microwave-scene3d-root";
  const ENGINE_KEY = "__microwaveScene3DEngine";
  const FRAME_STORAGE_KEY = "__FRAME_KEY__";
  const container = document.getElementById(CONTAINER_ID);
  if (!container) return;

  function clamp(v, lo, hi) {
    return Math.max(lo, Math.min(hi, v));
  }
  function lerp(a, b, t) {
    return a + ((b - a) * t);
  }

  function readLatestFrame() {
    try {
      const raw = window.localStorage.getItem(FRAME_STORAGE_KEY);
      if (raw) {
        const parsed = JSON.parse(raw);
        if (parsed && typeof parsed === "object") {
          return parsed;
        }
      }
    } catch (err) {
      // ignore storage parse errors
    }
    try {
      const host = window.parent || window;
      if (host.__microwaveScene3DLatestFrame && typeof host.__microwaveScene3DLatestFrame === "object") {
        return host.__microwaveScene3DLatestFrame;
      }
    } catch (err) {
      // ignore parent access errors
    }
    return {};
  }

  function drawDisplay(ctx, canvas, text, ended) {
    ctx.fillStyle = "#000";
    ctx.fillRect(0, 0, canvas.width, canvas.height);
    ctx.font = "32px 'Press Start 2P', monospace";
    ctx.fillStyle = ended ? "#ff5533" : "#0f0";
    ctx.textAlign = "center";
    ctx.fillText(text, canvas.width / 2, canvas.height / 2 + 10);
  }

  function createEngine(three, mountEl) {
    const width = Math.max(380, mountEl.clientWidth || 960);
    const height = Math.max(320, mountEl.clientHeight || 520);

    const scene = new three.Scene();
    scene.background = new three.Color(0xf0e6d6);

    const camera = new three.PerspectiveCamera(60, width / height, 0.1, 1000);
    camera.position.set(3.2, 2.6, 4.4);

    const renderer = new three.WebGLRenderer({ antialias: true });
    renderer.setPixelRatio(Math.min(window.devicePixelRatio || 1, 2));
    renderer.setSize(width, height, false);
    renderer.domElement.style.width = "100%";
    renderer.domElement.style.height = "100%";
    renderer.domElement.style.display = "block";
    mountEl.appendChild(renderer.domElement);

    const OrbitControlsCtor = three.OrbitControls || window.OrbitControls;
    const controls = OrbitControlsCtor ? new OrbitControlsCtor(camera, renderer.domElement) : null;
    if (controls) {
      controls.enableDamping = true;
      controls.dampingFactor = 0.05;
      controls.target.set(0, 0.75, 0);
      controls.maxPolarAngle = Math.PI * 0.495;
    }

    scene.add(new three.AmbientLight(0xffffff, 0.6));
    const keyLight = new three.DirectionalLight(0xffffff, 0.8);
    keyLight.position.set(5, 10, 7.5);
    scene.add(keyLight);

    const floor = new three.Mesh(
      new three.PlaneGeometry(20, 20),
      new three.MeshLambertMaterial({ color: 0x8b4513 })
    );
    floor.rotation.x = -Math.PI / 2;
    scene.add(floor);

    const wallMat = new three.MeshLambertMaterial({ color: 0xffe4c4 });
    const backWall = new three.Mesh(new three.PlaneGeometry(20, 10), wallMat);
    backWall.position.set(0, 5, -10);
    scene.add(backWall);

    const MW_WIDTH = 2.0;
    const MW_HEIGHT = 1.5;
    const MW_DEPTH = 1.0;

    const microwave = new three.Mesh(
      new three.BoxGeometry(MW_WIDTH, MW_HEIGHT, MW_DEPTH),
      new three.MeshLambertMaterial({ color: 0x333333 })
    );
    microwave.position.set(0, MW_HEIGHT / 2, 0);
    scene.add(microwave);

    const cavityLight = new three.PointLight(0xffd27a, 0.0, 2.5);
    cavityLight.position.set(0, 0.3, 0.2);
    microwave.add(cavityLight);

    // Door swings around its left edge.
    const doorHinge = new three.Group();
    doorHinge.position.set(-(MW_WIDTH - 0.1) / 2, 0, MW_DEPTH / 2 + 0.01);
    microwave.add(doorHinge);

    const door = new three.Mesh(
      new three.PlaneGeometry(MW_WIDTH - 0.1, MW_HEIGHT - 0.2),
      new three.MeshLambertMaterial({ color: 0x444444, side: three.DoubleSide })
    );
    door.position.set((MW_WIDTH - 0.1) / 2, 0, 0);
    doorHinge.add(door);

    const windowMat = new three.MeshBasicMaterial({ color: 0x222222, transparent: true, opacity: 0.8 });
    const windowMesh = new three.Mesh(new three.PlaneGeometry(1.2, 0.8), windowMat);
    windowMesh.position.set(0, 0.2, 0.01);
    door.add(windowMesh);

    const food = new three.Mesh(
      new three.BoxGeometry(0.3, 0.2, 0.3),
      new three.MeshLambertMaterial({ color: 0xb5651d })
    );
    food.position.set(0, -MW_HEIGHT / 2 + 0.2, 0.1);
    microwave.add(food);

    const displayCanvas = document.createElement("canvas");
    displayCanvas.width = 256;
    displayCanvas.height = 64;
    const displayCtx = displayCanvas.getContext("2d");
    drawDisplay(displayCtx, displayCanvas, "00:00.000", false);
    const displayTexture = new three.CanvasTexture(displayCanvas);
    const displayMesh = new three.Mesh(
      new three.PlaneGeometry(1, 0.3),
      new three.MeshBasicMaterial({ map: displayTexture, transparent: true })
    );
    displayMesh.position.set(0, -0.3, 0.02);
    door.add(displayMesh);

    const state = {
      frameSeq: "",
      displayText: "",
      ended: false,
      doorAngle: 0.0,
      foodRotation: 0.0,
      lightLevel: 0.0,
      lastAnimTimeMs: null,
      rafHandle: null,
    };
    const target = {
      displayText: "00:00.000",
      ended: false,
      doorAngle: 0.0,
      foodRotation: 0.0,
      lightLevel: 0.0,
      isCooking: false,
      spinRadPerMs: 0.0,
    };

    function setFrame(nextFrame) {
      if (!nextFrame || typeof nextFrame !== "object") {
        return;
      }
      state.frameSeq = String(nextFrame.frame_seq || "");
      target.displayText = String(nextFrame.display_text || "00:00.000");
      target.ended = !!nextFrame.ended;
      target.doorAngle = nextFrame.door_open ? -Math.PI * 0.6 : 0.0;
      target.lightLevel = nextFrame.light_on ? 1.2 : 0.0;
      target.isCooking = !!nextFrame.is_cooking;
      target.spinRadPerMs = Math.max(0.0, Number(nextFrame.food_spin_rad_per_ms || 0.0));
      target.foodRotation = Number(nextFrame.food_rotation_rad || 0.0);
      state.foodRotation = target.foodRotation;
    }

    function updateVisualState(dtMs) {
      if (target.displayText !== state.displayText || target.ended !== state.ended) {
        state.displayText = target.displayText;
        state.ended = target.ended;
        drawDisplay(displayCtx, displayCanvas, state.displayText, state.ended);
        displayTexture.needsUpdate = true;
      }
      if (target.isCooking) {
        state.foodRotation += target.spinRadPerMs * dtMs;
      }
      food.rotation.y = state.foodRotation;
      state.doorAngle = lerp(state.doorAngle, target.doorAngle, 0.12);
      doorHinge.rotation.y = state.doorAngle;
      state.lightLevel = lerp(state.lightLevel, target.lightLevel, 0.15);
      cavityLight.intensity = state.lightLevel;
      windowMat.color.setHex(state.lightLevel > 0.3 ? 0x4a3a1a : 0x222222);
    }

    function resizeRenderer() {
      const w = Math.max(380, mountEl.clientWidth || width);
      const h = Math.max(320, mountEl.clientHeight || height);
      renderer.setSize(w, h, false);
      camera.aspect = w / h;
      camera.updateProjectionMatrix();
    }
    window.addEventListener("resize", resizeRenderer);

    let frameReader = function () {
      return {};
    };
    let pollTimer = window.setInterval(function () {
      const polled = frameReader();
      if (polled && String(polled.frame_seq || "") !== state.frameSeq) {
        setFrame(polled);
      }
    }, 50);

    function animate(nowMs) {
      if (state.lastAnimTimeMs === null) {
        state.lastAnimTimeMs = nowMs;
      }
      const dtMs = clamp(nowMs - state.lastAnimTimeMs, 0.0, 120.0);
      state.lastAnimTimeMs = nowMs;
      updateVisualState(dtMs);
      if (controls) {
        controls.update();
      }
      renderer.render(scene, camera);
      state.rafHandle = requestAnimationFrame(animate);
    }
    state.rafHandle = requestAnimationFrame(animate);

    return {
      container: mountEl,
      setFrame: setFrame,
      setFrameReader: function (readerFn) {
        frameReader = readerFn;
      },
      dispose: function () {
        try {
          if (state.rafHandle) {
            cancelAnimationFrame(state.rafHandle);
          }
          if (pollTimer) {
            window.clearInterval(pollTimer);
            pollTimer = null;
          }
          window.removeEventListener("resize", resizeRenderer);
          renderer.dispose();
        } catch (err) {
          // ignore disposal errors
        }
      },
    };
  }

  function ensureThreeAndRender() {
    if (!window.THREE) {
      requestAnimationFrame(ensureThreeAndRender);
      return;
    }
    const incomingFrame = readLatestFrame();
    const existing = window[ENGINE_KEY];
    if (existing && existing.container === container) {
      existing.setFrameReader(readLatestFrame);
      existing.setFrame(incomingFrame);
      return;
    }
    if (existing && typeof existing.dispose === "function") {
      existing.dispose();
    }
    container.innerHTML = "";
    const engine = createEngine(window.THREE, container);
    engine.setFrameReader(readLatestFrame);
    engine.setFrame(incomingFrame);
    window[ENGINE_KEY] = engine;
  }

  ensureThreeAndRender();
})();
</script>
"""

    html = html_template.replace("__HEIGHT__", str(height)).replace(
        "__FRAME_KEY__", FRAME_STORAGE_KEY
    )
    components.html(html, height=height + 2, scrolling=False)


__all__ = ["publish_frame", "render_microwave_3d"]
