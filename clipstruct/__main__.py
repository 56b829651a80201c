"""Package entry point for ``python -m clipstruct``.

WHY: Users run the analyzer as ``python -m clipstruct analyze captions.json``
without installing the console script.

HOW: Delegates to the CLI's main() function, which handles both the
``analyze`` and ``serve`` subcommands.
"""

if __name__ == "__main__":
    from clipstruct.cli import main
    main()
