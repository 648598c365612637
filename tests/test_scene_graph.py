import numpy as np

from potator.components import SceneNodeComponent, TransformComponent
from potator.entity import NONE_ENTITY
from potator.scene_graph import SceneGraph
from potator.storage import ComponentStorage


def translation(x, y, z):
    m = np.eye(4, dtype=np.float32)
    m[:3, 3] = (x, y, z)
    return m


def make_graph():
    transforms, nodes = ComponentStorage(), ComponentStorage()
    return SceneGraph(transforms, nodes), transforms, nodes


def test_add_node_records_parent_and_children():
    graph, transforms, nodes = make_graph()
    graph.add_node(0, TransformComponent())
    graph.add_node(1, TransformComponent(), 0)
    assert graph.node(1).parent == 0
    assert graph.node(0).children == [1]
    assert graph.node(0).parent == NONE_ENTITY
    assert graph.order == (0, 1)
    assert 1 in transforms


def test_root_world_equals_local():
    graph, transforms, _ = make_graph()
    graph.add_node(0, TransformComponent(local=translation(1, 2, 3)))
    graph.update()
    np.testing.assert_array_equal(transforms[0].world, translation(1, 2, 3))


def test_world_is_not_aliased_to_local():
    graph, transforms, _ = make_graph()
    graph.add_node(0, TransformComponent(local=translation(1, 2, 3)))
    graph.update()
    transforms[0].local[0, 3] = 50
    assert transforms[0].world[0, 3] == 1


def test_child_world_composes_parent():
    graph, transforms, _ = make_graph()
    parent_local = translation(1, 0, 0)
    child_local = translation(0, 2, 0)
    graph.add_node(0, TransformComponent(local=parent_local))
    graph.add_node(1, TransformComponent(local=child_local), 0)
    graph.add_node(2, TransformComponent(local=translation(0, 0, 3)), 1)
    graph.update()
    np.testing.assert_allclose(transforms[1].world, parent_local @ child_local)
    np.testing.assert_allclose(
        transforms[2].world, transforms[1].world @ transforms[2].local
    )


def test_existing_nodes_are_sorted_parent_first():
    transforms, nodes = ComponentStorage(), ComponentStorage()
    transforms.store(5, TransformComponent(local=translation(0, 1, 0)))
    transforms.store(4, TransformComponent(local=translation(1, 0, 0)))
    nodes.store(5, SceneNodeComponent(5, 4))
    nodes.store(4, SceneNodeComponent(4, NONE_ENTITY, [5]))
    graph = SceneGraph(transforms, nodes)
    assert graph.order == (4, 5)
    graph.update()
    np.testing.assert_allclose(
        transforms[5].world, transforms[4].local @ transforms[5].local
    )


def test_entity_without_transform_is_skipped():
    graph, transforms, _ = make_graph()
    graph.add_node(0, TransformComponent(local=translation(1, 1, 1)))
    graph.add_node(1, TransformComponent(local=translation(2, 2, 2)), 0)
    transforms.drop(0)
    graph.update()
    np.testing.assert_array_equal(transforms[1].world, transforms[1].local)