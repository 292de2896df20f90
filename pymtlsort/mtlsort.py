"""
Reorder the materials of an OBJ/MTL pair to match their order of use.

Every 'usemtl' statement in the geometry text gets its own freshly named
'newmtl' declaration in the material text, in the order the statements
appear. A material that is used several times is duplicated accordingly.
Declarations are named 'mat0', 'mat1', ... and the usage statements are
rewritten to reference them.
"""

import re

from collections import namedtuple


DECLARATION_KEYWORD = "newmtl"
USAGE_KEYWORD = "usemtl"
DEFAULT_PREFIX = "mat"
MAX_NAME_LENGTH = 1023


# -- Errors

class MtlSortError(RuntimeError):
    pass


class InputError(MtlSortError):
    pass


class OutputError(MtlSortError):
    pass


class UnresolvedUsageError(MtlSortError):
    pass


class NameOverflowError(MtlSortError):
    pass


class VerificationError(MtlSortError):
    pass


# -- Data types

Declaration = namedtuple("Declaration", [ "start", "bodyStart", "end" ])

Usage = namedtuple("Usage", [ "start", "end", "name" ])

PlanEntry = namedtuple("PlanEntry", [ "index", "usage", "declaration" ])


# -- Text scanning

_lineBreak = re.compile(r"[\r\n][\x00-\x1f\x7f]*")
_lineEnd = re.compile(r"[\r\n]")


def nextLine(text, pos): # type: (str, int) -> int | None
    m = _lineBreak.search(text, pos)

    if m is None or m.end() >= len(text):
        return None

    return m.end()


def lineSpans(text):
    if not text:
        return

    start = 0
    while start is not None:
        following = nextLine(text, start)
        yield start, (len(text) if following is None else following)
        start = following


def lineContent(text, start, end): # type: (str, int, int) -> str
    m = _lineEnd.search(text, start, end)
    return text[start: end if m is None else m.start()]


def isComment(line): # type: (str) -> bool
    return line.lstrip().startswith('#')


def isUsage(line): # type: (str) -> bool
    fields = line.split(None, 1)
    return len(fields) > 0 and fields[0] == USAGE_KEYWORD


# -- Declarations

def indexDeclarations(material): # type: (str) -> list[Declaration]
    starts = []

    pos = material.find(DECLARATION_KEYWORD)
    while pos >= 0:
        starts.append(pos)
        pos = material.find(DECLARATION_KEYWORD, pos + 1)

    ends = starts[1:] + [len(material)]

    declarations = []
    for start, end in zip(starts, ends):
        m = _lineEnd.search(material, start, end)
        bodyStart = end if m is None else m.start()
        declarations.append(Declaration(start, bodyStart, end))

    return declarations


def containsName(material, declaration, name):
    # type: (str, Declaration, str) -> bool
    """
    Tests whether the text of a declaration contains the given name followed
    by optional blanks and a line break (or the end of the material text).
    """
    if not name:
        return False

    start, _, end = declaration
    pattern = re.compile(re.escape(name) + r"[ \t]*(?=[\r\n]|\Z)")

    m = pattern.search(material, start)
    return m is not None and m.start() + len(name) <= end


def resolveDeclaration(material, declarations, name):
    # type: (str, list[Declaration], str) -> Declaration
    """
    Finds the declaration a usage refers to.

    The declaration list is searched backwards, so that if a name matches
    several declarations the last one wins.
    """
    for declaration in reversed(declarations):
        if containsName(material, declaration, name):
            return declaration

    raise UnresolvedUsageError("no material declaration for '%s'" % name)


# -- Usages

def extractName(line, maxNameLength=MAX_NAME_LENGTH): # type: (str, int) -> str
    rest = line.lstrip()
    if rest.startswith(USAGE_KEYWORD):
        rest = rest[len(USAGE_KEYWORD):]

    name = rest.strip()

    if len(name) > maxNameLength:
        raise NameOverflowError(
            "material name of length %d exceeds the limit of %d: '%s...'"
            % (len(name), maxNameLength, name[:32])
        )

    return name


def findUsages(geometry, maxNameLength=MAX_NAME_LENGTH):
    # type: (str, int) -> list[Usage]
    usages = []

    for start, end in lineSpans(geometry):
        line = lineContent(geometry, start, end)

        if isComment(line) or not isUsage(line):
            continue

        name = extractName(line, maxNameLength)
        if not name:
            raise UnresolvedUsageError(
                "'%s' without a material name at offset %d"
                % (USAGE_KEYWORD, start)
            )

        usages.append(Usage(start, end, name))

    return usages


# -- Planning and output

def makePlan(geometry, material, log=None, maxNameLength=MAX_NAME_LENGTH):
    # type: (str, str, object, int) -> list[PlanEntry]

    declarations = indexDeclarations(material)
    if log:
        log("Found %d material declarations." % len(declarations))

    usages = findUsages(geometry, maxNameLength)
    if log:
        log("Found %d material usages." % len(usages))

    plan = []
    for index, usage in enumerate(usages):
        declaration = resolveDeclaration(material, declarations, usage.name)
        plan.append(PlanEntry(index, usage, declaration))

        if log:
            log("  %s -> declaration at offset %d" % (
                usage.name, declaration.start
            ))

    return plan


def rewriteMaterials(material, plan, prefix=DEFAULT_PREFIX):
    out = []

    for entry in plan:
        _, bodyStart, end = entry.declaration
        body = material[bodyStart:end]

        out.append("%s %s%d" % (DECLARATION_KEYWORD, prefix, entry.index))
        out.append(body if body else "\n")

    return "".join(out)


def rewriteGeometry(geometry, plan, prefix=DEFAULT_PREFIX):
    out = []
    pos = 0

    for entry in plan:
        out.append(geometry[pos:entry.usage.start])
        out.append("%s %s%d\n" % (USAGE_KEYWORD, prefix, entry.index))
        pos = entry.usage.end

    out.append(geometry[pos:])

    return "".join(out)


def sortMaterials(
    geometry, material, log=None,
    prefix=DEFAULT_PREFIX, maxNameLength=MAX_NAME_LENGTH
):
    plan = makePlan(geometry, material, log=log, maxNameLength=maxNameLength)

    return (
        rewriteGeometry(geometry, plan, prefix),
        rewriteMaterials(material, plan, prefix)
    )


def transform(
    geometry, material, geometryOut, materialOut, log=None,
    prefix=DEFAULT_PREFIX, maxNameLength=MAX_NAME_LENGTH
):
    """
    Rewrites a geometry text and its material text into two writable sinks.

    The complete plan is computed before anything is written, so an
    unresolved usage or an overlong name leaves both sinks untouched.
    """
    plan = makePlan(geometry, material, log=log, maxNameLength=maxNameLength)

    geometryOut.write(rewriteGeometry(geometry, plan, prefix))
    materialOut.write(rewriteMaterials(material, plan, prefix))

    return plan
