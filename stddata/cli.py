"""
a command-line interface for searching the standard data sets.  The :py:func:`main` function
provides the implementation.
"""
import sys, os, re, logging
from argparse import ArgumentParser

from . import config, StdDataException, ConfigurationException, ServiceUnavailable, BadRequest
from .provider import create_providers, DUMP_QUERY

prog = re.sub(r'\.py$', '', os.path.basename(sys.argv[0]))

FORMATS = "json csv text".split()

class Failure(StdDataException):
    """
    an exception indicating that the command failed and the program should exit with the
    given exit code.
    """
    def __init__(self, message: str, exitcode: int=1, cause: Exception=None):
        super(Failure, self).__init__(message)
        self.exitcode = exitcode
        self.cause = cause

def define_options(progname):
    """
    return an ArgumentParser instance that is configured with options
    for the command-line interface.
    """
    description = "search a standard data set (e.g. ISO country or language codes) for records " \
                  "whose key in a given index starts with a query string"
    epilog = f"If QUERY is not given, the entire index is printed (as with QUERY={DUMP_QUERY})."

    parser = ArgumentParser(progname, None, description, epilog)

    parser.add_argument('-c', '--config-file', type=str, dest='cfgfile', metavar='FILE',
                        help="a file containing the configuration to use.  If not provided, the "+
                             "country and language data sets are available with their default "+
                             "configurations.")
    parser.add_argument('-f', '--format', type=str, dest='format', metavar='FMT', default="json",
                        choices=FORMATS,
                        help="the output format, one of "+", ".join(FORMATS)+" (default: json)")
    parser.add_argument('-L', '--list', action='store_true', dest='list',
                        help="list the available data sets and their indexes and exit")
    parser.add_argument('-l', '--logfile', action='store', dest='logfile', type=str, metavar='FILE',
                        help="write messages that normally go to standard error to FILE as well.  "+
                             "If -q is also specified, the messages will only go to the logfile")
    parser.add_argument('-v', '--verbose', action='store_true', dest='verbose',
                        help="print more (debug) messages to standard error and/or the log file")
    parser.add_argument('-q', '--quiet', action='store_true', dest='quiet',
                        help="suppress all error and warning messages to standard error")
    parser.add_argument('dataset', metavar='DATASET', type=str, nargs='?',
                        help="the name of the data set to search (e.g. country)")
    parser.add_argument('index', metavar='INDEX', type=str, nargs='?',
                        help="the name of the index to search (e.g. alpha2)")
    parser.add_argument('query', metavar='QUERY', type=str, nargs='?', default=DUMP_QUERY,
                        help="the key prefix to search for")
    return parser

def main(progname, args, out=None):
    """
    search a data set and print the results
    :param str progname:  the name of the program (used in messages)
    :param list    args:  the command-line arguments
    :param file     out:  the stream to write results to (default: standard out)
    :raises Failure:  if the search could not be completed
    """
    if out is None:
        out = sys.stdout
    parser = define_options(progname)
    opts = parser.parse_args(args)

    rootlog = logging.getLogger()
    level = (opts.verbose and logging.DEBUG) or logging.INFO
    if opts.logfile:
        fmt = "%(asctime)s " + progname + ".%(name)s %(levelname)s: %(message)s"
        hdlr = logging.FileHandler(opts.logfile)
        hdlr.setFormatter(logging.Formatter(fmt))
        hdlr.setLevel(logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)

    if not opts.quiet:
        fmt = progname + ": %(levelname)s: %(message)s"
        hdlr = logging.StreamHandler(sys.stderr)
        hdlr.setFormatter(logging.Formatter(fmt))
        hdlr.setLevel(logging.WARNING if not opts.verbose else logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)
    elif not rootlog.handlers:
        rootlog.addHandler(logging.NullHandler())

    cfg = {}
    if opts.cfgfile:
        try:
            cfg = read_config(opts.cfgfile)
        except EnvironmentError as ex:
            raise Failure("problem reading config file, {0}: {1}"
                          .format(opts.cfgfile, ex.strerror), 3, ex) from ex

    try:
        providers = create_providers(cfg)
    except ConfigurationException as ex:
        raise Failure("Configuration error: "+str(ex), 3, ex) from ex

    if opts.list:
        for name, prov in providers.items():
            out.write("{0}: {1}\n".format(name, " ".join(prov.index_names)))
        return

    if not opts.dataset or not opts.index:
        raise Failure("Missing arguments: DATASET and INDEX are required (or use --list)", 3)
    prov = providers.get(opts.dataset)
    if not prov:
        raise Failure("{0}: not a recognized data set (available: {1})"
                      .format(opts.dataset, ", ".join(providers.keys())), 3)

    try:
        prov.load()
        results = prov.search(opts.index, opts.query)
    except ServiceUnavailable as ex:
        raise Failure(ex.message, 2, ex) from ex
    except BadRequest as ex:
        raise Failure(ex.message, 3, ex) from ex

    if opts.format == "csv":
        out.write(prov.export_as_csv(results))
    elif opts.format == "text":
        for grp in results:
            for ent in grp:
                out.write("\t".join(ent))
                out.write("\n")
    else:
        out.write(prov.export_as_json(results, True))
        out.write("\n")

def read_config(filepath):
    """
    read the configuration from a file having the given filepath

    :except Failure:  if the contents contains syntax or format errors
    :except IOError:  if a failure occurs while opening or reading the file
    """
    try:
        return config.load_from_file(filepath)
    except ConfigurationException as ex:
        raise Failure("Config parsing error: "+str(ex), 3, ex)
