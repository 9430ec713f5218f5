from rich.pretty import pprint

from vexil import *

parser = Parser(
    {
        "__subcommands": [
            Subcommand(
                "operation",
                required=True,
                test=lambda x: x in ("get", "set") or f"{x!r} is not a supported operation, use 'get' or 'set'",
                metavar="get|set",
            ),
            Subcommand("notification", descr="Email to send notification on operation completion", metavar="email"),
        ],
        "__tail": [
            Cardinal("source", descr="The source URI"),
            Cardinal("files", rest=True, descr="Any number of space separated target file paths", metavar="files"),
        ],
        "simple-string": Option(alias="s", descr="A simple string flag test"),
        "string": Option(
            alias="S",
            default="default",
            metavar="helpful-name",
            transform=str.upper,
            descr="A complex string flag test",
        ),
    },
    descr="This is a test of your emergency preparedness systems. Please do not be alarmed!",
    shell=True,
)

schema = {
    "number": Option(
        type="number",
        required=True,
        test=lambda x: x > 10 or "--number requires a value greater than 10",
        alias=("n", "num"),
        descr="A simple number flag test",
    ),
    "list": Option(type="csv", descr="A simple csv list flag test"),
    "bool": Option(type="boolean", descr="A simple boolean flag test"),
    "complex-boolean": Option(
        type="boolean",
        alias=("c", "B", "c-bool"),
        transform=lambda x: f"{'T' if parse_boolean(x) is True else 'Not t'}o be",
        descr="A complex boolean flag test",
    ),
}


if __name__ == '__main__':
    pprint(parser.parse(schema=schema))
