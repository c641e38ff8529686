"""Tests for construct() hierarchy resolution"""

import math

import numpy as np
import pytest

from skelform import (
    Armature, Bone, ConstructOptions, DataIntegrityError, Mesh, Transform2D, animate, armature_from_dict, construct,
    time_frame,
)
from skelform.animation.construct import compose


def chain(root_rotation=0.0, child_pos=(0.0, 0.0), grandchild_pos=(0.0, 0.0)):
    return armature_from_dict({
        "bones": [
            {"id": 0, "name": "root", "pos": {"x": 2, "y": 3}, "rot": root_rotation},
            {"id": 1, "name": "child", "parent_id": 0, "pos": list(child_pos)},
            {"id": 2, "name": "grandchild", "parent_id": 1, "pos": list(grandchild_pos)},
        ],
    })


def test_construct_zero_locals_collapse_onto_root():
    armature = chain(root_rotation=math.pi / 2)
    resolved = construct(armature)

    for bone in resolved:
        assert np.allclose(bone.position, [2.0, 3.0])
        assert bone.rotation == pytest.approx(math.pi / 2)


def test_construct_root_rotation_carries_to_descendants():
    """Root rotated 90 degrees maps a +x offset onto +y"""
    armature = chain(root_rotation=math.pi / 2, child_pos=(1.0, 0.0), grandchild_pos=(1.0, 0.0))
    root, child, grandchild = construct(armature)

    assert np.allclose(child.position, [2.0, 4.0], atol=1e-6)
    assert np.allclose(grandchild.position, [2.0, 5.0], atol=1e-6)
    assert grandchild.rotation == pytest.approx(math.pi / 2)


def test_construct_rotation_accumulates():
    armature = chain(child_pos=(1.0, 0.0), grandchild_pos=(1.0, 0.0))
    armature.bones[1].local.rotation = math.pi / 2

    root, child, grandchild = construct(armature)

    assert np.allclose(child.position, [3.0, 3.0], atol=1e-6)
    assert np.allclose(grandchild.position, [3.0, 4.0], atol=1e-6)
    assert grandchild.rotation == pytest.approx(math.pi / 2)


def test_construct_scale_inherited_multiplicatively():
    armature = chain(child_pos=(1.0, 1.0), grandchild_pos=(1.0, 0.0))
    armature.bones[0].local.scale[:] = (2.0, 3.0)
    armature.bones[1].local.scale[:] = (0.5, 2.0)

    root, child, grandchild = construct(armature)

    assert np.allclose(child.position, [4.0, 6.0])
    assert np.allclose(child.scale, [1.0, 6.0])
    assert np.allclose(grandchild.position, [5.0, 6.0])


def test_construct_default_options_is_identity_on_roots():
    armature = armature_from_dict({
        "bones": [
            {"id": 0, "name": "a", "pos": {"x": 3, "y": -1}, "rot": 0.25, "scale": {"x": 2, "y": 1}},
            {"id": 1, "name": "b", "pos": {"x": -7, "y": 4}, "rot": -1.0},
        ],
    })
    for bone, resolved in zip(armature.bones, construct(armature, ConstructOptions())):
        assert np.array_equal(resolved.position, bone.local.position)
        assert resolved.rotation == bone.local.rotation
        assert np.array_equal(resolved.scale, bone.local.scale)


def test_construct_rest_chain_at_origin_is_identity():
    armature = chain()
    armature.bones[0].rest = Transform2D()
    armature.reset_pose()
    for bone, resolved in zip(armature.bones, construct(armature)):
        assert np.allclose(resolved.position, bone.local.position)


def test_construct_does_not_mutate_armature():
    armature = chain(root_rotation=1.0, child_pos=(1.0, 0.0))
    before = [bone.local.copy() for bone in armature.bones]

    construct(armature, ConstructOptions(position=(100.0, 50.0), scale=(2.0, 2.0), flip_x=True))

    assert [bone.local for bone in armature.bones] == before


def test_construct_options_offset_and_scale():
    armature = chain(child_pos=(1.0, 0.0))
    options = ConstructOptions(position=(10.0, 20.0), scale=(2.0, 2.0))

    root, child, _ = construct(armature, options)

    assert np.allclose(root.position, [14.0, 26.0])
    assert np.allclose(child.position, [16.0, 26.0])
    assert np.allclose(root.scale, [2.0, 2.0])


def test_construct_flip_x_mirrors_positions_and_rotation():
    armature = chain(root_rotation=0.3, child_pos=(1.0, 0.0))
    plain = construct(armature)
    flipped = construct(armature, ConstructOptions(flip_x=True))

    for a, b in zip(plain, flipped):
        assert b.position[0] == pytest.approx(-a.position[0], abs=1e-6)
        assert b.position[1] == pytest.approx(a.position[1], abs=1e-6)
        assert b.rotation == pytest.approx(-a.rotation)
        assert b.scale[0] == pytest.approx(-a.scale[0])


def test_construct_options_match_root_composition():
    """Options act like a parent transform of the root"""
    armature = chain(root_rotation=0.7, child_pos=(1.5, -0.5), grandchild_pos=(0.25, 2.0))
    armature.bones[1].local.rotation = -0.4
    options = ConstructOptions(position=(3.0, -2.0), scale=(2.0, 0.5), flip_y=True)

    resolved = construct(armature, options)

    parent = Transform2D(options.position, 0.0, options.effective_scale())
    world = compose(parent, armature.bones[0].local)
    world = compose(world, armature.bones[1].local)
    world = compose(world, armature.bones[2].local)

    assert np.allclose(resolved[2].position, world.position, atol=1e-5)
    assert resolved[2].rotation == pytest.approx(world.rotation)


def test_construct_y_up_flips_y_and_rotation():
    armature = chain(root_rotation=0.5, child_pos=(1.0, 0.0))
    plain = construct(armature)
    screen = construct(armature, ConstructOptions(y_up=True))

    for a, b in zip(plain, screen):
        assert b.position[1] == pytest.approx(-a.position[1], abs=1e-6)
        assert b.rotation == pytest.approx(-a.rotation)
        assert np.allclose(b.scale, a.scale)


def test_construct_handles_children_listed_before_parents():
    armature = armature_from_dict({
        "bones": [
            {"id": 0, "name": "hand", "parent_id": 1, "pos": {"x": 1, "y": 0}},
            {"id": 1, "name": "arm", "parent_id": 2, "pos": {"x": 1, "y": 0}},
            {"id": 2, "name": "root", "pos": {"x": 0, "y": 0}},
        ],
    })
    assert armature.bone_order == [2, 1, 0]

    hand, arm, root = construct(armature)
    assert np.allclose(hand.position, [2.0, 0.0])
    assert hand.name == "hand"


def test_construct_matrix_places_origin_at_position():
    armature = chain(root_rotation=math.pi / 2)
    root = construct(armature)[0]
    matrix = np.array(root.model_matrix())

    origin = np.array([0.0, 0.0, 0.0, 1.0]) @ matrix
    along_x = np.array([1.0, 0.0, 0.0, 1.0]) @ matrix
    assert np.allclose(origin[:2], [2.0, 3.0])
    assert np.allclose(along_x[:2], [2.0, 4.0], atol=1e-6)


def test_invalid_parent_rejected_at_load():
    with pytest.raises(DataIntegrityError):
        armature_from_dict({"bones": [{"id": 0, "name": "a", "parent_id": 5}]})


def test_cyclic_parents_rejected_at_load():
    with pytest.raises(DataIntegrityError):
        armature_from_dict({
            "bones": [
                {"id": 0, "name": "root"},
                {"id": 1, "name": "a", "parent_id": 2},
                {"id": 2, "name": "b", "parent_id": 1},
            ],
        })


def test_self_parent_rejected_at_load():
    with pytest.raises(DataIntegrityError):
        armature_from_dict({"bones": [{"id": 0, "name": "a", "parent_id": 0}]})


def test_slide_scenario(slide_armature):
    """Child slides 0 -> 10 over 10 frames; at 0.5s and 20fps it sits at x=10 from the root"""
    animation = slide_armature.animations[0]

    frame = time_frame(0.5, animation, False, False)
    assert frame == pytest.approx(10.0)

    animate(slide_armature.bones, [animation], [frame])
    root, child = construct(slide_armature)

    assert np.allclose(child.position, root.position + np.array([10.0, 0.0]))
    assert np.allclose(child.position, [15.0, 5.0])


def test_construct_orders_hand_built_armature():
    armature = Armature(bones=[
        Bone(0, "hand", parent_id=1, rest=Transform2D((1.0, 0.0))),
        Bone(1, "root", rest=Transform2D((5.0, 5.0))),
    ])

    hand, root = construct(armature)

    assert np.allclose(root.position, [5.0, 5.0])
    assert np.allclose(hand.position, [6.0, 5.0])
    assert armature.bone_order == [1, 0]


def test_construct_picks_up_bones_added_after_validation(chain_armature):
    chain_armature.bones.append(Bone(3, "tip", parent_id=2, rest=Transform2D((1.0, 0.0))))

    resolved = construct(chain_armature)

    assert len(resolved) == 4
    assert np.allclose(resolved[3].position, [3.0, 0.0])


def test_construct_rejects_hand_built_armature_with_bad_parent():
    armature = Armature(bones=[Bone(0, "orphan", parent_id=4)])
    with pytest.raises(DataIntegrityError):
        construct(armature)


def mesh_armature():
    mesh = Mesh(positions=[[1.0, 0.0], [0.0, 1.0]], uvs=[[0.0, 0.0], [1.0, 1.0]], indices=[])
    return armature_from_dict({
        "bones": [{"id": 0, "name": "root", "pos": {"x": 10, "y": 0}, "rot": math.pi / 2, "scale": {"x": 2, "y": 1}}],
    }), mesh


def test_construct_moves_mesh_vertices_with_bone():
    armature, mesh = mesh_armature()
    armature.bones[0].mesh = mesh

    root = construct(armature)[0]

    # scale (2, 1), quarter turn, then offset (10, 0)
    assert np.allclose(root.vertices, [[10.0, 2.0], [9.0, 0.0]], atol=1e-5)
    assert root.mesh is mesh
    assert np.allclose(mesh.positions, [[1.0, 0.0], [0.0, 1.0]])


def test_construct_y_up_mirrors_mesh_vertices():
    armature, mesh = mesh_armature()
    armature.bones[0].mesh = mesh

    plain = construct(armature)[0]
    screen = construct(armature, ConstructOptions(y_up=True))[0]

    assert np.allclose(screen.vertices[:, 0], plain.vertices[:, 0], atol=1e-5)
    assert np.allclose(screen.vertices[:, 1], -plain.vertices[:, 1], atol=1e-5)


def test_construct_without_mesh_has_no_vertices(chain_armature):
    assert all(bone.vertices is None for bone in construct(chain_armature))
