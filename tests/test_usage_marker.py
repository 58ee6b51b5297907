"""Tests for UsageMarker.mark called directly on individual nodes."""
import pytest

from proptrace.analyzer.analysis import PropUsageAnalyzer
from proptrace.analyzer.components import OwnerKind
from proptrace.analyzer.usage_marker import OBJECT_PROTOTYPE_NAMES, UnhandledNodeError


@pytest.fixture
def setup(parse):
    """Parse ``code`` and return (root, tracker) with components and schemas registered."""
    def _setup(code):
        tree = parse(code)
        return tree.root_node, PropUsageAnalyzer().build_tracker(tree)
    return _setup


class TestUnhandledNodes:
    """Node kinds mark does not accept."""

    def test_unhandled_node_kind_raises(self, setup, find_node):
        """An identifier is neither an access, a function nor a declarator."""
        root, tracker = setup("""
            function Box(props) {
              return <div>{props.a}</div>;
            }
        """)
        identifier = find_node(root, 'identifier', 'Box')

        with pytest.raises(UnhandledNodeError, match="identifier"):
            tracker.marker.mark(identifier)

    def test_unhandled_node_error_is_value_error(self):
        """Callers catching ValueError also catch UnhandledNodeError."""
        assert issubclass(UnhandledNodeError, ValueError)


class TestAccessChains:
    """Member and subscript chains."""

    def test_mark_access_chain(self, setup, find_node, enter_frames):
        """props.style.color records the full path, then the prefix."""
        root, tracker = setup("""
            function Box(props) {
              return <div>{props.style.color}</div>;
            }
        """)
        access = find_node(root, 'member_expression', 'props.style')
        enter_frames(tracker.scopes, access)

        tracker.marker.mark(access)
        box = tracker.registry.list()[0]

        assert [r.path for r in box.used_props] == [('style', 'color'), ('style',)]
        assert [r.name for r in box.used_props] == ['color', 'style']

    def test_parent_names_prefix_the_path(self, setup, find_node, enter_frames):
        """Names collected by the caller are kept in front."""
        root, tracker = setup("""
            function Box(props) {
              return <div>{props.color}</div>;
            }
        """)
        access = find_node(root, 'member_expression', 'props.color')
        enter_frames(tracker.scopes, access)

        tracker.marker.mark(access, parent_names=('theme',))

        assert [r.path for r in tracker.registry.list()[0].used_props] == [('theme', 'color')]

    def test_reported_node_for_qualified_access(self, setup, find_node, enter_frames):
        """this.props.body reports the body key."""
        root, tracker = setup("""
            class Note extends React.Component {
              render() {
                return <p>{this.props.body}</p>;
              }
            }
        """)
        access = find_node(root, 'member_expression', 'this.props')
        enter_frames(tracker.scopes, access)

        tracker.marker.mark(access)
        record = tracker.registry.list()[0].used_props[0]

        assert record.node.type == 'property_identifier'
        assert record.node.text == b'body'

    def test_object_prototype_names_cover_common_methods(self):
        """Inherited method names are listed; ordinary prop names are not."""
        assert {'toString', 'hasOwnProperty', 'valueOf', 'constructor'} <= OBJECT_PROTOTYPE_NAMES
        assert 'children' not in OBJECT_PROTOTYPE_NAMES


class TestDestructuring:
    """Function params and variable declarators."""

    def test_mark_function_with_destructured_params(self, setup, find_node, enter_frames):
        """Each destructured param field becomes a record on its pattern node."""
        root, tracker = setup("""
            const Tag = ({ text, tone }) => <span className={tone}>{text}</span>;
        """)
        fn = find_node(root, 'arrow_function')
        enter_frames(tracker.scopes, fn)

        tracker.marker.mark(fn)
        tag = tracker.registry.list()[0]

        assert [r.path for r in tag.used_props] == [('text',), ('tone',)]
        assert tag.used_props[0].node.type == 'shorthand_property_identifier_pattern'

    def test_mark_function_without_pattern_is_a_no_op(self, setup, find_node):
        """A plain props parameter records nothing by itself."""
        root, tracker = setup("""
            const Tag = (props) => <span />;
        """)
        tracker.marker.mark(find_node(root, 'arrow_function'))

        assert tracker.registry.list()[0].used_props == []

    def test_mark_declarator_rest_suppresses(self, setup, find_node, enter_frames):
        """A rest element sets the suppress flag."""
        root, tracker = setup("""
            function Panel(props) {
              const { title, ...others } = props;
              return <section title={title} />;
            }
        """)
        declarator = find_node(root, 'variable_declarator')
        enter_frames(tracker.scopes, declarator)

        tracker.marker.mark(declarator)
        panel = tracker.registry.list()[0]

        assert [r.path for r in panel.used_props] == [('title',)]
        assert panel.ignore_unused_props_validation

    def test_mark_declarator_continues_past_computed_key(self, setup, find_node, enter_frames):
        """Members after a computed key are still recorded."""
        root, tracker = setup("""
            function Panel(props) {
              const { [dynamic]: picked, title, body } = props;
              return <section title={title}>{body}</section>;
            }
        """)
        declarator = find_node(root, 'variable_declarator')
        enter_frames(tracker.scopes, declarator)

        tracker.marker.mark(declarator)
        panel = tracker.registry.list()[0]

        assert [r.name for r in panel.used_props] == ['title', 'body']
        assert panel.ignore_unused_props_validation

    def test_mark_declarator_on_unrelated_init(self, setup, find_node, enter_frames):
        """Destructuring something other than props records nothing."""
        root, tracker = setup("""
            function Panel(props) {
              const { title } = settings;
              return <section title={title} />;
            }
        """)
        declarator = find_node(root, 'variable_declarator')
        enter_frames(tracker.scopes, declarator)

        tracker.marker.mark(declarator)

        assert tracker.registry.list()[0].used_props == []


class TestOwners:
    """Which registry entry receives the records."""

    def test_usage_outside_component_creates_ungrouped_owner(self, setup, find_node, enter_frames):
        """No enclosing component: the reading node keys an ungrouped owner."""
        root, tracker = setup("""
            function compute(props) {
              return props.total + 1;
            }
        """)
        access = find_node(root, 'member_expression', 'props.total')
        enter_frames(tracker.scopes, access)

        owner = tracker.marker.owner_for(access)
        tracker.marker.mark(access)

        assert owner.kind is OwnerKind.UNGROUPED
        assert owner.node_id == access.id
        assert tracker.registry.list() == []
        ungrouped = tracker.registry.ungrouped()
        assert len(ungrouped) == 1
        assert [r.path for r in ungrouped[0].used_props] == [('total',)]

    def test_owner_through_hook_callback(self, setup, find_node, enter_frames):
        """A read inside useMemo belongs to the component around it."""
        root, tracker = setup("""
            function Chart(props) {
              const scaled = useMemo(() => props.data.map(scale), [props.data]);
              return <svg>{scaled}</svg>;
            }
        """)
        access = find_node(root, 'member_expression', 'props.data')

        owner = tracker.marker.owner_for(access)

        assert owner == tracker.registry.list()[0].key

    def test_explicit_owner_wins(self, setup, find_node, enter_frames):
        """An owner passed in overrides the enclosing lookup."""
        root, tracker = setup("""
            function Shell(props) {
              return <main />;
            }
            function helper(props) {
              return props.extra;
            }
        """)
        shell = tracker.registry.list()[0]
        access = find_node(root, 'member_expression', 'props.extra')
        enter_frames(tracker.scopes, access)

        tracker.marker.mark(access, owner=shell.key)

        assert [r.path for r in shell.used_props] == [('extra',)]
        assert tracker.registry.ungrouped() == []
