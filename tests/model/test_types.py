from apidiff.model.types import Declaration, DeclKind, Embed, Field, Method, Package, Shape

# ----------------------------
# Helpers
# ----------------------------


def _struct(name: str = "T") -> Declaration:
    return Declaration(
        name=name,
        kind=DeclKind.TYPE,
        signature="struct{A int}",
        shape=Shape.AGGREGATE,
        fields=(Field(name="A", type="int"), Field(name="b", type="string", exported=False)),
        method_set=(Method(name="Get", signature="() int"),),
    )


# ----------------------------
# Text forms
# ----------------------------


def test_value_text_is_kind_name_signature():
    d = Declaration(name="A", kind=DeclKind.VAR, signature="int", package="pack")
    assert d.text == "var pack.A int"
    assert d.qualified_name == "pack.A"


def test_func_text_splices_name_after_keyword():
    d = Declaration(name="K", kind=DeclKind.FUNC, signature="func(x int) string", package="pack")
    assert d.text == "func pack.K(x int) string"


def test_async_func_text_keeps_prefix():
    d = Declaration(name="Fetch", kind=DeclKind.FUNC, signature="async func(url str) -> bytes", package="net")
    assert d.text == "async func net.Fetch(url str) -> bytes"


def test_func_text_without_keyword_in_signature():
    d = Declaration(name="K", kind=DeclKind.FUNC, signature="(int)", package="pack")
    assert d.text == "func pack.K(int)"


def test_type_text_and_unqualified_name():
    d = Declaration(name="T1", kind=DeclKind.TYPE, signature="struct{A int; G string}", shape=Shape.AGGREGATE)
    assert d.qualified_name == "T1"
    assert d.text == "type T1 struct{A int; G string}"
    assert d.is_named_type()


def test_method_text_with_and_without_receiver():
    assert Method(name="M", signature="() int", receiver="*pack.T").text == "func (*pack.T).M() int"
    assert Method(name="M", signature="()").text == "func M()"


def test_decl_kind_values():
    assert DeclKind.VAR.is_value()
    assert DeclKind.CONST.is_value()
    assert not DeclKind.FUNC.is_value()
    assert not DeclKind.TYPE.is_value()
    assert DeclKind("type") is DeclKind.TYPE
    assert Shape("contract") is Shape.CONTRACT


# ----------------------------
# Package
# ----------------------------


def test_package_of_fills_package_and_receivers():
    p = Package.of("pack", [_struct()])
    t = p.lookup("T")

    assert t is not None
    assert t.package == "pack"
    assert t.method_set[0].receiver == "pack.T"


def test_package_of_keeps_explicit_receiver():
    d = Declaration(
        name="T",
        kind=DeclKind.TYPE,
        signature="struct{}",
        shape=Shape.AGGREGATE,
        method_set=(Method(name="M", signature="()", receiver="*pack.T"),),
    )
    t = Package.of("pack", [d]).declarations["T"]
    assert t.method_set[0].receiver == "*pack.T"


def test_package_names_are_sorted_regardless_of_insertion_order():
    p = Package(
        name="pack",
        declarations={
            "b": Declaration(name="b", kind=DeclKind.VAR, signature="int", exported=False),
            "Z": Declaration(name="Z", kind=DeclKind.VAR, signature="int"),
            "A": Declaration(name="A", kind=DeclKind.VAR, signature="int"),
        },
    )
    assert p.names() == ["A", "Z", "b"]
    assert [d.name for d in p.exported()] == ["A", "Z"]
    assert len(p) == 3
    assert p.lookup("missing") is None


# ----------------------------
# Serialization
# ----------------------------


def test_declaration_round_trip_keeps_members():
    iface = Declaration(
        name="I1",
        kind=DeclKind.TYPE,
        signature="interface{X()}",
        package="pack",
        shape=Shape.CONTRACT,
        methods=(Method(name="X", signature="()", receiver="pack.I1"),),
    )
    outer = Declaration(
        name="I2",
        kind=DeclKind.TYPE,
        signature="interface{pack.I1}",
        package="pack",
        shape=Shape.CONTRACT,
        embeds=(Embed(qualified_name="pack.I1", declaration=iface),),
    )

    restored = Declaration.from_dict(outer.to_dict(), package="pack")

    assert restored == outer
    assert restored.embeds[0].exported


def test_declaration_to_dict_omits_empty_members():
    d = Declaration(name="A", kind=DeclKind.VAR, signature="int")
    assert d.to_dict() == {"name": "A", "kind": "var", "signature": "int", "exported": True}


def test_from_dict_defaults_type_shape_to_other():
    d = Declaration.from_dict({"name": "S", "kind": "TYPE", "signature": "[]string"}, package="pack")
    assert d.kind == DeclKind.TYPE
    assert d.shape == Shape.OTHER
    assert d.package == "pack"


def test_package_round_trip():
    p = Package.of(
        "pack",
        [
            _struct(),
            Declaration(name="K", kind=DeclKind.FUNC, signature="func(int)"),
        ],
    )
    data = p.to_dict()

    assert [d["name"] for d in data["declarations"]] == ["K", "T"]
    assert Package.from_dict(data) == p
