import sys

def dispatch_main(commands, argv=None, prog="thrtools"):
    """
    Run the sub-command named by the first command line token.

    Parameters
    ----------
    commands : dict
        dictionary keying command names to callables. Each callable takes the
        remaining argument list (a list of str) and parses it itself.
    argv : list of str, optional
        arguments to process. if None, use sys.argv[1:]
    prog : str, default "thrtools"
        program name used in usage messages.

    Returns
    -------
    object
        whatever the command callable returns.

    Raises
    ------
    SystemExit
        if no command is given or the command is not recognized. The exit
        status is non-zero and the message names the offending token.
    """

    if argv is None:
        argv = sys.argv[1:]

    available = ", ".join(sorted(commands))
    if len(argv) == 0:
        sys.exit(f"usage: {prog} command [options]\navailable commands: {available}")

    command = argv[0]
    if command in ["-h", "--help"]:
        print(f"usage: {prog} command [options]")
        print(f"available commands: {available}")
        return None

    if command not in commands:
        sys.exit(f"{prog}: invalid command '{command}'. Available commands: {available}")

    return commands[command](argv[1:])
