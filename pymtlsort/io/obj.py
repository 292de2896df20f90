import numpy as np

from collections import namedtuple


Face = namedtuple(
    "Face",
    [
        "vertices",
        "texverts",
        "normals",
        "object",
        "group",
        "material",
        "smoothinggroup"
    ]
)

Mesh = namedtuple(
    "Mesh",
    [ "vertices", "normals", "texverts", "faces", "materials"]
)


def load(fp, materials=None):
    """
    Reads an OBJ mesh from a file-like object.

    Material properties are taken from the given dictionary (see
    loadmaterials); 'mtllib' statements are not followed.
    """
    vertices = []
    normals = []
    texverts = []
    faces = []

    if materials is None:
        materials = {}

    obj = None
    group = None
    material = None
    smoothinggroup = None

    for rawline in fp.readlines():
        line = rawline.strip()

        if len(line) == 0 or line[0] == '#':
            continue

        fields = line.split()
        cmd = fields[0]
        pars = fields[1:]

        if cmd == 'v':
            vertices.append([float(pars[0]), float(pars[1]), float(pars[2])])
        elif cmd == 'vt':
            texverts.append([float(pars[0]), float(pars[1])])
        elif cmd == 'vn':
            normals.append([float(pars[0]), float(pars[1]), float(pars[2])])
        elif cmd == 'o':
            obj = pars[0] if pars else None
        elif cmd == 'g':
            group = pars[0] if pars else None
        elif cmd == 'usemtl':
            material = line[len(cmd):].strip()
        elif cmd == 's':
            smoothinggroup = pars[0]
        elif cmd == 'f':
            fv = []
            ft = []
            fn = []

            for i in range(len(pars)):
                idcs = pars[i].split('/')
                v = int(idcs[0]) if len(idcs) > 0 and idcs[0] else 0
                vt = int(idcs[1]) if len(idcs) > 1 and idcs[1] else 0
                vn = int(idcs[2]) if len(idcs) > 2 and idcs[2] else 0
                fv.append(v + (len(vertices) if v < 0 else -1))
                ft.append(vt + (len(texverts) if vt < 0 else -1))
                fn.append(vn + (len(normals) if vn < 0 else -1))

            faces.append(Face(
                vertices=fv,
                texverts=ft,
                normals=fn,
                object=obj,
                group=group,
                material=material,
                smoothinggroup=smoothinggroup
            ))

    return Mesh(
        vertices=np.array(vertices),
        normals=np.array(normals),
        texverts=np.array(texverts),
        faces=faces,
        materials=materials
    )


def loadmaterials(fp, target):
    """
    Reads material declarations into a dictionary of property lines.

    A name declared more than once keeps the properties of its last
    declaration.
    """
    material = None

    for rawline in fp.readlines():
        line = rawline.strip()

        if len(line) == 0 or line[0] == '#':
            continue

        fields = line.split()

        if fields[0] == 'newmtl':
            material = line[len(fields[0]):].strip()
            target[material] = []
        elif material is not None:
            target[material].append(" ".join(fields))


def libraryPath(line, dir=None):
    import os.path

    mtlpath = line.strip()[len('mtllib'):].strip()
    if os.path.dirname(mtlpath) == '' and dir is not None:
        mtlpath = os.path.join(dir, mtlpath)

    return mtlpath


def findMaterialLibrary(text, path=None):
    """
    Returns the path of the first material library referenced in an OBJ
    text, or None if there is no 'mtllib' statement.
    """
    import os.path
    dir = None if path is None else os.path.dirname(os.path.abspath(path))

    for rawline in text.splitlines():
        fields = rawline.split()
        if len(fields) > 1 and fields[0] == 'mtllib':
            return libraryPath(rawline, dir)

    return None
