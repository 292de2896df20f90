def checkRewrite(geometry, material, geometryOut, materialOut, log=None):
    """
    Compares an OBJ/MTL pair with its rewritten version.

    Returns a list of problems found, which is empty if the geometry is
    unchanged and every face still uses the same material properties.
    """
    import numpy as np

    before = loadPair(geometry, material)
    after = loadPair(geometryOut, materialOut)

    problems = []

    for field in [ "vertices", "texverts", "normals" ]:
        if not np.array_equal(getattr(before, field), getattr(after, field)):
            problems.append("%s differ after rewrite" % field)

    if len(before.faces) != len(after.faces):
        problems.append("face count changed from %d to %d" % (
            len(before.faces), len(after.faces)
        ))
        return problems

    for i, (f, g) in enumerate(zip(before.faces, after.faces)):
        if f.vertices != g.vertices or f.texverts != g.texverts:
            problems.append("face %d has different indices" % i)
        elif properties(before, f) != properties(after, g):
            problems.append("face %d: material '%s' became '%s'" % (
                i, f.material, g.material
            ))

    if log:
        log("Checked %d faces, %d problems." % (
            len(before.faces), len(problems)
        ))

    return problems


def loadPair(geometry, material):
    from io import StringIO
    from pymtlsort.io import obj

    materials = {}
    obj.loadmaterials(StringIO(material), materials)

    return obj.load(StringIO(geometry), materials=materials)


def properties(mesh, face):
    if face.material is None:
        return None

    return mesh.materials.get(face.material)
