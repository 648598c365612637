"""The main loop tying all systems together."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Protocol

from .commands import CommandDispatcher
from .components import Components, ImGuiComponent
from .entity import EntityRegistry, default_registry
from .gpu import GraphicsDevice
from .lighting import Lighting
from .movement import MovementSystem
from .rendering import MeshRenderer
from .scene_graph import SceneGraph
from .storage import Signal
from .timing import FixedStepTracker, FrameClock
from .views import ViewManager


class EngineExtension(ABC):
    """Hooks into the engine's main loop."""

    @abstractmethod
    def initialize(self) -> None:
        """Called before the main loop."""

    @abstractmethod
    def on_frame_started(self) -> None:
        """Called at the start of every frame."""

    @abstractmethod
    def on_before_state_updated(self) -> None:
        """Called after commands are dispatched, before state is updated."""

    @abstractmethod
    def on_before_scene_rendered(self) -> None:
        """Called after state is updated, before rendering."""

    @abstractmethod
    def cleanup(self) -> None:
        """Called after the main loop."""


class WindowEvents(Protocol):
    window_resized: Signal

    def handle(self) -> bool: ...


class ScriptRunner(Protocol):
    def update(self) -> None: ...


class Overlay(Protocol):
    def new_frame(self) -> None: ...

    def update(self) -> None: ...

    def render(self) -> None: ...


@dataclass(eq=False)
class Systems:
    """Every system the engine drives."""

    renderer: MeshRenderer
    scene_graph: SceneGraph
    views: ViewManager
    movement_system: MovementSystem
    fixed_step_tracker: FixedStepTracker
    command_dispatcher: CommandDispatcher
    lighting: Lighting
    loader: Any
    window_handler: WindowEvents
    scripting: ScriptRunner
    imgui: Overlay
    clock: FrameClock


class FrameTimeHistory:
    """The last frame times in milliseconds, starting filled with zeros."""

    def __init__(self, capacity: int = 1000) -> None:
        self._samples: deque[float] = deque([0.0] * capacity, maxlen=capacity)

    def push(self, milliseconds: float) -> None:
        self._samples.append(milliseconds)

    @property
    def samples(self) -> tuple[float, ...]:
        return tuple(self._samples)

    @property
    def peak_ms(self) -> float:
        return float(round(max(self._samples)))


class Engine:
    """Runs frames until the window handler reports the window closed."""

    def __init__(
        self,
        device: GraphicsDevice,
        systems: Systems,
        components: Components,
        *,
        debug: bool = False,
        registry: EntityRegistry | None = None,
    ) -> None:
        self._device = device
        self._systems = systems
        self._components = components
        self._debug = debug
        self._registry = registry or default_registry()
        self._extension: EngineExtension | None = None
        self.frame_history = FrameTimeHistory()

        systems.fixed_step_tracker.subscribe(systems.movement_system)
        systems.window_handler.window_resized.connect(
            lambda w, h: self._systems.views.on_window_resized(w, h)
        )
        systems.window_handler.window_resized.connect(
            lambda w, h: self._device.on_window_resized(w, h)
        )

    def set_extension(self, extension: EngineExtension) -> None:
        self._extension = extension

    def run(self) -> None:
        systems = self._systems
        if self._debug:
            self._add_debug_window()
        extension = self._extension
        if extension is not None:
            extension.initialize()

        while systems.window_handler.handle():
            systems.clock.update()
            if extension is not None:
                extension.on_frame_started()

            systems.imgui.new_frame()
            systems.command_dispatcher.dispatch()
            if extension is not None:
                extension.on_before_state_updated()

            systems.scripting.update()
            systems.fixed_step_tracker.update()
            systems.scene_graph.update()
            systems.lighting.update()
            systems.views.update()
            if extension is not None:
                extension.on_before_scene_rendered()

            systems.imgui.update()
            self._device.clear(0.0, 0.0, 0.0, 1.0)
            systems.renderer.render()
            systems.imgui.render()
            self._device.present()

        if extension is not None:
            extension.cleanup()

    def _add_debug_window(self) -> None:
        clock = self._systems.clock
        history = self.frame_history

        def record() -> None:
            history.push(clock.frame_time * 1000.0)

        self._components.imgui_elements.store(self._registry.get_new(), ImGuiComponent(draw=record))