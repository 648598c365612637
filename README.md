# potator

The core of a small real-time 3D engine, built around an entity-component
system. It is a library: it has no command-line program.

## What is in it

- **`potator.entity`** – `EntityRegistry` hands out consecutive integer
  entity ids from zero; `default_registry()` returns a process-wide one.
  `NONE_ENTITY` marks "no entity".
- **`potator.storage`** – `ComponentStorage` keeps one component per entity
  in a dense, sparse-set layout (`store`, `drop`, `values`, `in`, `[]`,
  `len`, iteration over entities). Its `component_added` and
  `component_removed` members are `Signal`s that systems connect to.
- **`potator.components`** – dataclasses for transforms, velocities, meshes,
  materials, cameras, point/ambient/directional lights, scene nodes, scripts,
  overlay elements and RGBA textures; `LaunchingParams` (title, size,
  `GpuApi`, fixed step rate); `Components`, a bundle of all the storages.
  Light and material records have `pack()` giving their GPU byte layout.
- **`potator.vertices`** – `Vertex`, `ColoredVertex`, `CompositeVertex` and
  `TexturedVertex`, each with a `layout()` of `VertexMemberDescriptor`s and
  a `pack()` to bytes.
- **`potator.gpu`** – resource handles, pipeline stages and slot numbers,
  CPU-side buffers (`ConstantBuffer`, `StructuredBuffer`, `IndexBuffer`,
  `VertexBuffer`) and the abstract `GraphicsDevice`, `ShaderBinary` and
  `ShaderCache` interfaces.
- **`potator.commands`** – `CommandDispatcher` queues commands per entity
  (in `CommandQueueComponent`s) and runs them all on `dispatch()`.
  `AxisBoundVelocityCommand`, `RelativeVelocityCommand` and
  `RelativeTransformationCommand` change an entity's velocity or local
  transform.
- **`potator.timing`** – `FrameClock` measures the time between updates;
  `FixedStepTracker` calls `FixedStep` subscribers once per whole fixed tick.
- **`potator.scene_graph`** – `SceneGraph` stores parent/child nodes and
  computes world transforms from local ones, parents first.
- **`potator.views`** – `ViewManager` creates a default camera, tracks the
  active one, and uploads its view-projection matrix and position;
  `projection_transform()` and `view_transform()` build the matrices.
- **`potator.movement`** – `MovementSystem` applies velocities on each fixed
  tick; `MovementApi` queues per-axis velocity changes (`Axis.X/Y/Z`).
- **`potator.lighting`** – `Lighting` uploads `LightsConfig` and up to 16
  point lights placed at their entities' world positions.
- **`potator.rendering`** – `MeshRenderer` draws every entity that has a
  mesh, a material and a transform.
- **`potator.engine`** – `Engine` runs the frame loop over a `Systems`
  bundle, calling an optional `EngineExtension` at fixed points. With
  `debug=True` it records frame times into `engine.frame_history`.
- **`potator.scene_file`** – reads the JSON chunk of a binary glTF (`.glb`)
  file, and the Lua scripts (`extras.lua`) and pixel shader names
  (`extras.ps`) stored on its nodes.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## A short example

```python
from potator.entity import EntityRegistry
from potator.storage import ComponentStorage
from potator.components import TransformComponent, VelocityComponent
from potator.commands import CommandDispatcher, RelativeVelocityCommand
from potator.movement import MovementSystem

registry = EntityRegistry()
transforms = ComponentStorage()
movements = ComponentStorage()
queues = ComponentStorage()

mover = MovementSystem(transforms, movements)
mover.set_tick_rate(100)

ship = registry.get_new()
transforms.store(ship, TransformComponent())
movements.store(ship, VelocityComponent())

dispatcher = CommandDispatcher(queues)
command = RelativeVelocityCommand(movements, transforms)
command.linear_velocity[2] = 0.5
dispatcher.enqueue(ship, command)

dispatcher.dispatch()   # sets the ship's velocity in its own frame
mover.update()          # moves it one fixed step
print(transforms[ship].local)
```

`RelativeVelocityCommand` turns the given velocity by the entity's world
rotation block scaled to unit Frobenius norm, so the resulting velocity's
length depends on that scaling.

## Reading a scene file

```python
from potator.scene_file import load_glb_json, lua_scripts

document = load_glb_json("teapot.glb")
scripts = lua_scripts("teapot.glb")   # node name -> Lua source
```

A file that is not a GLB file, whose first chunk is not JSON, or that ends
early raises `GlbFormatError`.

## What it does not do

- There is no concrete graphics device: implement `GraphicsDevice` (and
  `ShaderCache`) for the API you render with.
- There is no window, input handling, Lua interpreter or on-screen overlay.
  `Engine` expects a window handler (`handle()` and a `window_resized`
  signal), a script runner (`update()`) and an overlay (`new_frame()`,
  `update()`, `render()`) to be supplied in `Systems`.
- Meshes, materials and textures are not loaded from scene files; only the
  JSON chunk and its node extras are read.