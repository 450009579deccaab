import sys
import inspect
import argparse

def generalized_main(fcn,
                     argv=None,
                     prog=None,
                     manual_arg_types=None,
                     manual_arg_choices=None):
    """
    Build a command line parser from the signature of a function, parse the
    arguments, and call the function with them.

    Parameters without defaults become required positional arguments.
    Parameters with defaults become `--name` options whose type is taken from
    the default. Boolean parameters become flags that flip the default.

    Parameters
    ----------
    fcn : callable
        function to run.
    argv : iterable, optional
        arguments to parse. if None, use sys.argv[1:]
    prog : str, optional
        program name shown in usage messages. if None, use the function name.
    manual_arg_types : dict, optional
        dictionary keying arguments to types. This overrides the type inferred
        from the signature (needed when a float parameter has an int-looking
        default, or the default is None).
    manual_arg_choices : dict, optional
        dictionary keying arguments to the list of allowed values.

    Returns
    -------
    object
        whatever `fcn` returns.
    """

    if argv is None:
        argv = sys.argv[1:]

    if manual_arg_types is None:
        manual_arg_types = {}
    if manual_arg_choices is None:
        manual_arg_choices = {}

    if prog is None:
        prog = fcn.__name__

    parser = argparse.ArgumentParser(prog=prog,
                                     description=inspect.getdoc(fcn),
                                     formatter_class=argparse.RawTextHelpFormatter)

    param = inspect.signature(fcn).parameters
    for p in param:

        # No default in the signature means a required positional argument.
        # A default of None gives no useful type, so leave it to argparse
        # (str) unless a manual type is given.
        default = param[p].default
        if default is param[p].empty:
            required = True
            arg_type = None
            default = None
        else:
            required = False
            arg_type = None if default is None else type(default)

        if p in manual_arg_types:
            arg_type = manual_arg_types[p]

        kwargs = {}
        if p in manual_arg_choices:
            kwargs["choices"] = manual_arg_choices[p]

        if required:
            parser.add_argument(p, type=arg_type, **kwargs)
            continue

        arg_name = f"--{p}"
        if arg_type is bool:
            action = "store_false" if default is True else "store_true"
            parser.add_argument(arg_name, action=action)
        else:
            parser.add_argument(arg_name,
                                type=arg_type,
                                default=default,
                                **kwargs)

    args = parser.parse_args(argv)

    return fcn(**vars(args))
