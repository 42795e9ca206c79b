from rich.pretty import pprint

from signatory import *


class Greeter:
    @classmethod
    def default_method_attributes(cls, name):
        return attr(shell=True, fancy=True, colorful=True)

    @method("hello", named(who={"isa": "Str", "required": True}))
    def hello(self, args):
        return "Hello %s!" % args["who"]

    greet = method(
        "greet",
        semi({"isa": "Str"}, excited={"isa": "Bool", "default": False}),
        lambda self, name, args: ("GREETINGS %s!" if args["excited"] else "Hi %s!") % name
    )


method(
    "morning",
    positional({"isa": "Str", "required": True}),
    lambda self, name: "Good morning %s!" % name,
    into=Greeter
)


if __name__ == '__main__':
    pprint(Greeter.__dict__["greet"])
    pprint(Greeter().hello(who="world"))
    pprint(Greeter.greet("Jens", excited=True))
    pprint(Greeter().morning("Jens"))
    Greeter().hello()
