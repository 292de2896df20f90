"""
Tests for the OBJ/MTL loader used when checking a rewrite.
"""

import io
import os

import numpy as np

from pymtlsort.io import obj


OBJ = (
    "# a triangle and a quad\n"
    "mtllib lib.mtl\n"
    "v 0 0 0\n"
    "v 1 0 0\n"
    "v 1 1 0\n"
    "v 0 1 0\n"
    "vt 0 0\n"
    "g body\n"
    "usemtl skin\n"
    "f 1/1 2/1 3/1\n"
    "usemtl cloth\n"
    "f 1 2 3 4\n"
)

MTL = (
    "# comment\n"
    "newmtl skin\n"
    "Kd  1 0.8 0.7\n"
    "\n"
    "newmtl cloth\n"
    "Kd 0 0 1\n"
    "map_Kd cloth.png\n"
)


def test_load_with_given_materials():
    materials = {}
    obj.loadmaterials(io.StringIO(MTL), materials)
    mesh = obj.load(io.StringIO(OBJ), materials=materials)

    assert mesh.vertices.shape == (4, 3)
    assert mesh.texverts.shape == (1, 2)
    assert len(mesh.faces) == 2
    assert mesh.faces[0].vertices == [0, 1, 2]
    assert mesh.faces[0].texverts == [0, 0, 0]
    assert mesh.faces[0].group == "body"
    assert [f.material for f in mesh.faces] == ["skin", "cloth"]
    assert mesh.materials is materials


def test_load_does_not_follow_mtllib():
    """The library named by mtllib is not opened; it does not even exist."""
    mesh = obj.load(io.StringIO(OBJ))

    assert mesh.materials == {}
    assert [f.material for f in mesh.faces] == ["skin", "cloth"]
    assert np.array_equal(mesh.vertices[2], [1.0, 1.0, 0.0])


def test_loadmaterials_normalizes_whitespace():
    materials = {}
    obj.loadmaterials(io.StringIO(MTL), materials)

    assert materials == {
        "skin": ["Kd 1 0.8 0.7"],
        "cloth": ["Kd 0 0 1", "map_Kd cloth.png"],
    }


def test_loadmaterials_last_declaration_wins():
    materials = {}
    obj.loadmaterials(
        io.StringIO("newmtl A\nKd 1 0 0\nnewmtl A\nKd 0 0 1\n"), materials
    )

    assert materials == {"A": ["Kd 0 0 1"]}


def test_find_material_library(tmp_path):
    objpath = str(tmp_path / "mesh.obj")

    assert obj.findMaterialLibrary(OBJ, objpath) == os.path.join(
        str(tmp_path), "lib.mtl"
    )
    assert obj.findMaterialLibrary(OBJ) == "lib.mtl"
    assert obj.findMaterialLibrary("v 0 0 0\n", objpath) is None
