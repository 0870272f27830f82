"""Tests for full generation runs and program assembly."""

import pytest

from factory import arith, chain, number, procedure, say, var_get, var_set

from blockjava.backend.context import Diagnostic, GenerationResult
from blockjava.backend.definitions import HelperDefinition, Signature
from blockjava.backend.java import (
    FILE_HEADER,
    REQUIRED_IMPORTS,
    GenerationError,
    JavaConfig,
    JavaGenerator,
    render_doc_block,
)
from blockjava.blocks import STORAGE_LOCAL, Block, Variable, Workspace

EXPECTED_CLASS = """\
package demo;

import com.google.appinventor.components.annotations.DesignerComponent;
import com.google.appinventor.components.annotations.SimpleObject;
import com.google.appinventor.components.common.ComponentCategory;
import com.google.appinventor.components.runtime.AndroidNonvisibleComponent;
import com.google.appinventor.components.runtime.ComponentContainer;
import java.text.DecimalFormat;
import java.text.NumberFormat;

@SimpleObject(external=true)
@DesignerComponent(version = 0, nonVisible = true, category = ComponentCategory.EXTENSION, \
iconName = "images/extension.png", description = "An AppInventor 2 Extension. Made With Rapid.", \
versionName = "1.0")
public class MyApp extends AndroidNonvisibleComponent {

    public MyApp(ComponentContainer container) {
        super(container.$form());
    }

    protected double count;

    /**
     * Description goes here
     *
     * @param object
     * @return String
     */
    public static String blocklyToString(Object object) {
        if (object instanceof String) {
            return (String) object;
        }
        if (object instanceof Number) {
            NumberFormat formatter = new DecimalFormat("#.#####");
            return formatter.format(((Number) object).doubleValue());
        }
        return "UNKNOWN";
    }

    /**
     * Description goes here
     */
    public void Run() {
        count = 1;
        System.out.println(blocklyToString(count));
    }
}
"""


def _counter_workspace(**options) -> Workspace:
    body = chain(var_set("count", number("1")), say(var_get("count")))
    return Workspace([procedure("Run", [], body)], [Variable("count", {"Number"})], options)


def _declare(block, e):
    e.set_global_var(block, block.get_field_value("VAR"), block.get_field_value("INIT"))
    return ""


def _declaration(name: str, init: str | None = None) -> Block:
    fields = {"VAR": name}
    if init is not None:
        fields["INIT"] = init
    return Block("declare", fields=fields)


# --- Whole unit ---


def test_full_unit(generator):
    result = generator.run(_counter_workspace())
    header = FILE_HEADER.replace("<<Your Name>>", "Ada").replace("<<Year>>", "2024")
    assert result.code == header + EXPECTED_CLASS
    assert result.ok()


def test_runs_do_not_leak(generator):
    first = generator.run(_counter_workspace()).code
    second = generator.run(_counter_workspace()).code
    assert first == second
    assert "count2" not in second


def test_required_imports_always_present(generator):
    code = generator.generate(Workspace())
    for name in REQUIRED_IMPORTS:
        assert "import " + name + ";" in code
    assert "java.text" not in code


def test_empty_workspace(generator):
    code = generator.generate(Workspace())
    assert code.endswith("    public MyApp(ComponentContainer container) {\n        super(container.$form());\n    }\n}\n")


def test_block_root(generator):
    ws = _counter_workspace()
    code = generator.generate(ws.get_top_blocks()[0])
    assert "protected double count;" in code
    assert "public void Run() {" in code


def test_naked_value_becomes_statement(generator):
    code = generator.generate(Workspace([arith("+", number("1"), number("2"))]))
    assert "    1 + 2;\n" in code


def test_trailing_whitespace_removed(generator):
    generator.register("spacey", lambda block, e: "x();   \n")
    code = generator.generate(Workspace([Block("spacey")]))
    assert "    x();\n}" in code
    assert " \n" not in code


# --- Failure paths ---


@pytest.mark.parametrize("root", ["not a block", 42, None, [Block("x")]])
def test_fatal_root(generator, root):
    with pytest.raises(GenerationError) as info:
        generator.run(root)
    assert info.value.msg == "Not a block or workspace: " + repr(root)


def test_fatal_root_via_generate(generator, capsys):
    with pytest.raises(GenerationError):
        generator.generate({"blocks": []})
    assert capsys.readouterr().out == ""


def test_diagnostics_reported(generator, capsys):
    ws = Workspace([Block("mystery", id="m1")], [Variable("w", {"Widget"})])
    result = generator.run(ws)
    assert not result.ok()
    assert [d.category for d in result.warnings()] == ["type", "block"]
    assert repr(result.warnings()[1]) == "warning: [block] no emitter for block type 'mystery' (block m1)"
    generator.generate(ws)
    err = capsys.readouterr().err
    assert "warning: [type] unknown type 'Widget', using Object" in err
    assert "warning: [block] no emitter" in err


def test_diagnostic_and_result():
    diag = Diagnostic("type", "empty type, using Object")
    assert repr(diag) == "warning: [type] empty type, using Object"
    assert str(diag) == repr(diag)
    assert GenerationResult("x", []).ok()
    assert not GenerationResult("x", [diag]).ok()


def test_register_validates():
    gen = JavaGenerator()
    with pytest.raises(ValueError):
        gen.register("", lambda block, e: "")
    with pytest.raises(ValueError):
        gen.register("text", "not callable")


def test_block_decorator(config):
    gen = JavaGenerator(config)

    @gen.block("beep")
    def beep(block, e):
        return "beep();\n"

    assert gen.emitters["beep"] is beep
    assert "    beep();\n" in gen.generate(Workspace([Block("beep")]))


# --- Fields ---


def test_field_initializers(generator):
    generator.register("declare", _declare)
    ws = Workspace(
        [
            _declaration("v"),
            _declaration("flag"),
            _declaration("name"),
            _declaration("n", "42"),
            _declaration("o"),
        ],
        [
            Variable("v", {"Var"}),
            Variable("flag", {"Boolean"}),
            Variable("name", {"Colour"}),
            Variable("n", {"Number"}),
            Variable("o", {"Number", "String"}),
        ],
    )
    code = generator.generate(ws)
    assert "    protected Var v = new Var();\n" in code
    assert "    protected boolean flag = false;\n" in code
    assert '    protected String name = "";\n' in code
    assert "    protected double n = 42;\n" in code
    assert "    protected Object o;\n" in code


def test_local_variables_are_not_fields(generator):
    ws = Workspace(
        [procedure("f", ["p"], var_set("p", number("1"))), var_set("tmp", number("2"))],
        [Variable("tmp", {"Number"}, STORAGE_LOCAL)],
    )
    code = generator.generate(ws)
    assert "protected" not in code.split("public MyApp(")[1]


def test_variable_names_avoid_reserved_words(generator):
    generator.add_reserved_words(["count"])
    code = generator.generate(_counter_workspace())
    assert "protected double count2;" in code
    assert "count2 = 1;" in code


def test_registered_class_type(generator):
    generator.register_class("Counter", "CounterImpl")
    generator.register("declare", _declare)
    code = generator.generate(Workspace([_declaration("c")], [Variable("c", {"Counter"})]))
    assert "protected CounterImpl c;" in code


def test_generator_equivalence(generator):
    generator.add_equivalence("Text", "String")
    generator.register("declare", _declare)
    code = generator.generate(Workspace([_declaration("s")], [Variable("s", {"Text", "String"})]))
    assert 'protected String s = "";' in code


def test_unknown_nested_type_field(generator):
    generator.register("declare", _declare)
    result = generator.run(Workspace([_declaration("w")], [Variable("w", {"Widget:Number"})]))
    assert "    protected Object w;\n" in result.code
    assert "Object<" not in result.code
    assert [d.category for d in result.warnings()] == ["type"]


# --- Helpers ---


def test_helper_emitted_once_for_many_sites(generator):
    sites = chain(*[say(var_get("x" + str(i))) for i in range(5)])
    code = generator.generate(Workspace([procedure("Show", [], sites)]))
    assert code.count("String blocklyToString(") == 1
    assert code.count("blocklyToString(x") == 5


def test_static_helpers_before_instance_helpers(generator):
    def helpers(block, e):
        e.provide_function("zeta", "public static int {{FUNCTION_NAME}}() { return 0; }")
        e.provide_function("alpha", "public void {{FUNCTION_NAME}}() {}")
        e.provide_function("beta", "private static void {{FUNCTION_NAME}}() {}")
        return ""

    generator.register("helpers", helpers)
    code = generator.generate(Workspace([Block("helpers")]))
    assert code.index("void beta()") < code.index("int zeta()") < code.index("void alpha()")


def test_doc_block_from_explicit_signature(generator):
    def helper(block, e):
        e.provide_function("add", "static int {{FUNCTION_NAME}}(int a, int b) { return a + b; }", Signature(["x", "y"], "int"))
        return ""

    generator.register("helper", helper)
    code = generator.generate(Workspace([Block("helper")]))
    assert "     *\n     * @param x\n     * @param y\n     * @return int\n     */\n    static int add(" in code


def test_render_doc_block():
    no_params = HelperDefinition("f", "f", "int f() {}", Signature([], "int"))
    assert render_doc_block(no_params) == "/**\n * Description goes here\n *\n * @return int\n */\n"
    void = HelperDefinition("g", "g", "void g(int a) {}", Signature(["a"], "void"))
    assert render_doc_block(void) == "/**\n * Description goes here\n *\n * @param a\n */\n"
    raw = HelperDefinition("h", "h", "int H = 1;", None)
    assert render_doc_block(raw) == ""


def test_definition_without_signature_has_no_doc(generator):
    def constant(block, e):
        e.provide_function("LIMIT", "static final int {{FUNCTION_NAME}} = compute(3);")
        return ""

    generator.register("constant", constant)
    code = generator.generate(Workspace([Block("constant")]))
    assert "/**" not in code
    assert "    static final int LIMIT = compute(3);\n" in code


# --- Configuration ---


def test_config_metadata(generator):
    config = JavaConfig(
        app_name="Weather",
        description='Says "hi"',
        version_name="2.1",
        version_number=7,
        home_website="https://example.com",
        min_sdk="21",
        icon="icon.png",
        package="com.example.weather",
        year=2020,
        author="Grace",
    )
    code = generator.generate(Workspace(), config)
    assert "Copyright (c) 2020, Grace" in code
    assert "package com.example.weather;\n" in code
    assert (
        '@DesignerComponent(version = 7, nonVisible = true, category = ComponentCategory.EXTENSION, '
        'iconName = "icon.png", description = "Says \\"hi\\"", versionName = "2.1", '
        'helpUrl = "https://example.com", androidMinSdk = 21)\n'
    ) in code
    assert "public class Weather extends AndroidNonvisibleComponent {" in code
    assert "public Weather(ComponentContainer container) {" in code


def test_optional_metadata_omitted(generator):
    code = generator.generate(Workspace())
    assert "helpUrl" not in code
    assert "androidMinSdk" not in code


def test_empty_names_fall_back(generator):
    code = generator.generate(Workspace(), JavaConfig(app_name="", package="", base_class=""))
    assert "package demo;" in code
    assert "public class MyApp {" in code


def test_app_title_overrides_name(generator):
    code = generator.generate(_counter_workspace(app_title="Counter App"))
    assert "public class Counter_App extends AndroidNonvisibleComponent {" in code


def test_interfaces(generator, config):
    config.add_interface("Runnable")
    config.add_interface("Runnable")

    def iface(block, e):
        e.add_interface("Runnable")
        e.add_interface("Cloneable")
        return ""

    generator.register("iface", iface)
    code = generator.generate(Workspace([Block("iface")]), config)
    assert "public class MyApp extends AndroidNonvisibleComponent implements Runnable, Cloneable {" in code
    assert config.interfaces == ["Runnable"]


def test_base_class_spelled_verbatim(generator):
    code = generator.generate(Workspace(), JavaConfig(base_class="Object"))
    assert "public class MyApp extends Object {" in code


def test_user_names_avoid_interfaces(generator, config):
    config.add_interface("Runnable")
    code = generator.generate(Workspace([var_set("Runnable", number("1"))]), config)
    assert "implements Runnable {" in code
    assert "    Runnable2 = 1;\n" in code


def test_imports_from_config(generator):
    config = JavaConfig(extra_imports=["java.util.List"], need_imports=["import android.util.Log;"])
    code = generator.generate(Workspace(), config)
    assert "import android.util.Log;\nimport com.google" in code
    assert "ComponentContainer;\nimport java.util.List;\n" in code
    assert config.extra_imports == ["java.util.List"]


def test_extra_classes(generator, config):
    config.set_extra_class("Holder", ["class Holder {", "    int value;", "}"])

    def more(block, e):
        e.set_extra_class("Pair", ["class Pair {", "}"])
        return ""

    generator.register("more", more)
    code = generator.generate(Workspace([Block("more")]), config)
    assert code.endswith("    }\n}\n\nclass Holder {\n    int value;\n}\nclass Pair {\n}\n")
    assert list(config.extra_classes) == ["Holder"]


def test_config_reserved_words(generator):
    code = generator.generate(_counter_workspace(), JavaConfig(reserved_words=["Run"]))
    assert "public void Run2() {" in code


# --- Settle pass ---


def test_settle_runs_before_emission(generator):
    seen: list[str] = []

    def update(block):
        seen.append(block.id)
        block.fields["TEXT"] = "after"

    value = Block("text", id="t1", fields={"TEXT": "before"}, output=["String"], onchange=update)
    code = generator.generate(Workspace([procedure("Show", [], say(value))]))
    assert 'System.out.println("after");' in code
    assert seen == ["t1"]
