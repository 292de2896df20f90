def parseArguments(argv=None):
    import argparse

    from pymtlsort.mtlsort import DEFAULT_PREFIX, MAX_NAME_LENGTH

    parser = argparse.ArgumentParser(
        description=''.join([
            'Reorder and duplicate the materials of an OBJ/MTL pair so that',
            ' their declarations match the order of use. The files are',
            ' modified in place unless output paths are given.'
        ])
    )
    parser.add_argument(
        'objpath',
        type=str,
        help='mesh in OBJ format'
    )
    parser.add_argument(
        'mtlpath',
        type=str,
        nargs='?',
        default=None,
        help='material library (defaults to the first mtllib of the mesh)'
    )
    parser.add_argument(
        '-o', '--objout',
        type=str,
        help='path for the rewritten OBJ data (defaults to objpath)'
    )
    parser.add_argument(
        '-m', '--mtlout',
        type=str,
        help='path for the rewritten MTL data (defaults to mtlpath)'
    )
    parser.add_argument(
        '-p', '--prefix',
        type=str,
        default=DEFAULT_PREFIX,
        help='prefix for the generated material names'
    )
    parser.add_argument(
        '--max-name-length',
        type=int,
        default=MAX_NAME_LENGTH,
        help='longest material name accepted in a usemtl statement'
    )
    parser.add_argument(
        '-b', '--backup',
        action='store_true',
        default=False,
        help='keep copies of the original files with a .bak extension'
    )
    parser.add_argument(
        '-c', '--check',
        action='store_true',
        default=False,
        help='verify that every face keeps its material before writing'
    )
    parser.add_argument(
        '-n', '--dry-run',
        action='store_true',
        default=False,
        help='compute the rewrite but do not write any files'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=False,
        help='print some information while working'
    )

    return parser.parse_args(argv)


def run(argv=None):
    import sys
    from pymtlsort.mtlsort import MtlSortError

    args = parseArguments(argv)

    if args.verbose:
        log = lambda s: sys.stdout.write(s + '\n')
    else:
        log = None

    try:
        process(args, log=log)
    except MtlSortError as ex:
        sys.stderr.write("error: %s\n" % ex)
        return 1

    return 0


def main():
    import sys
    sys.exit(run())


def process(args, log=None):
    import os.path
    from pymtlsort.io.obj import findMaterialLibrary
    from pymtlsort.mtlsort import InputError, OutputError, sortMaterials

    objText = loadText(args.objpath)

    mtlpath = args.mtlpath
    if mtlpath is None:
        mtlpath = findMaterialLibrary(objText, args.objpath)
        if mtlpath is None:
            raise InputError(
                "no material library given and none referenced in '%s'"
                % args.objpath
            )
        if log:
            log("Using material library %s" % mtlpath)

    mtlText = loadText(mtlpath)

    objOut, mtlOut = sortMaterials(
        objText, mtlText, log=log,
        prefix=args.prefix, maxNameLength=args.max_name_length
    )

    if args.check:
        checkOutput(objText, mtlText, objOut, mtlOut, log=log)

    if args.dry_run:
        if log:
            log("Dry run, no files written.")
        return

    objDest = args.objout or args.objpath
    mtlDest = args.mtlout or mtlpath

    if os.path.abspath(objDest) == os.path.abspath(mtlDest):
        raise OutputError(
            "OBJ and MTL output would both be written to '%s'" % objDest
        )

    if args.backup:
        backup([ p for p in [objDest, mtlDest] if _exists(p) ], log=log)

    saveTexts({ objDest: objOut, mtlDest: mtlOut }, log=log)


def checkOutput(objText, mtlText, objOut, mtlOut, log=None):
    from pymtlsort.mtlsort import VerificationError
    from pymtlsort.verify import checkRewrite

    try:
        problems = checkRewrite(objText, mtlText, objOut, mtlOut, log=log)
    except (ValueError, IndexError) as ex:
        raise VerificationError("cannot parse mesh for checking: %s" % ex)

    if problems:
        raise VerificationError(
            "rewrite changes the mesh:\n  " + "\n  ".join(problems[:10])
        )


def loadText(path):
    from pymtlsort.mtlsort import InputError

    try:
        with open(
            path, encoding='utf-8', errors='surrogateescape', newline=''
        ) as fp:
            text = fp.read()
    except OSError as ex:
        raise InputError("failed to read file '%s': %s" % (path, ex))

    if not text:
        raise InputError("file '%s' is empty" % path)

    return text


def saveTexts(texts, log=None):
    """
    Writes several files so that either all or none of them are replaced.

    Each text goes to a temporary file next to its destination first. The
    destinations are only replaced once every temporary file was written.
    If replacing one of them fails, the destinations replaced before are
    restored from copies taken beforehand.
    """
    import os
    import shutil
    import tempfile
    from pymtlsort.mtlsort import OutputError

    pending = []
    saved = []
    replaced = []

    try:
        for path, text in texts.items():
            dir = os.path.dirname(os.path.abspath(path))
            fd, tmppath = tempfile.mkstemp(
                prefix='.' + os.path.basename(path) + '.', dir=dir
            )
            pending.append((tmppath, path))

            with os.fdopen(
                fd, 'w', encoding='utf-8', errors='surrogateescape', newline=''
            ) as fp:
                fp.write(text)

            if os.path.exists(path):
                shutil.copymode(path, tmppath)
                shutil.copy2(path, tmppath + '.orig')
                saved.append((tmppath + '.orig', path))

        for tmppath, path in pending:
            os.replace(tmppath, path)
            replaced.append(path)
    except OSError as ex:
        for savedpath, path in saved:
            if path in replaced:
                os.replace(savedpath, path)
        for tmppath, _ in pending + saved:
            if os.path.exists(tmppath):
                os.remove(tmppath)
        raise OutputError("failed to write output: %s" % ex)

    for savedpath, _ in saved:
        os.remove(savedpath)

    if log:
        for path in replaced:
            log("Wrote %s" % path)


def backup(paths, log=None):
    import shutil
    from pymtlsort.mtlsort import OutputError

    for path in paths:
        try:
            shutil.copy2(path, path + '.bak')
        except OSError as ex:
            raise OutputError("failed to back up '%s': %s" % (path, ex))

        if log:
            log("Saved backup %s.bak" % path)


def _exists(path):
    import os.path
    return os.path.exists(path)


if __name__ == '__main__':
    import sys
    from os.path import abspath, dirname

    sys.path.append(dirname(dirname(abspath(__file__))))

    main()
