"""Tests for the lexical-context predicates of ScopeClassifier."""
import pytest

from proptrace.analyzer.scope import ScopeClassifier

LIFECYCLE_CLASS = """
    class Widget extends React.Component {
      constructor(props) {
        super(props);
        this.ready = props.ready;
      }
      componentWillReceiveProps(nextProps) {
        const apply = () => nextProps.mode;
        apply();
      }
      static getDerivedStateFromProps(props) {
        return { seed: props.seed };
      }
      componentDidUpdate(prevProps) {
        this.setState(
          (state, p) => ({ n: p.step }),
          () => done(prevProps.step)
        );
      }
      render() {
        return <div>{this.props.label}</div>;
      }
    }
"""


@pytest.fixture
def widget(parse):
    return parse(LIFECYCLE_CLASS).root_node


class TestFrameStack:
    """push, pop and depth."""

    def test_push_rejects_non_function(self, widget):
        """Only function-like nodes open frames."""
        scopes = ScopeClassifier()
        with pytest.raises(ValueError, match="does not open a function scope"):
            scopes.push(widget)

    def test_push_pop_depth(self, widget, find_node):
        """pop returns the frame that was pushed."""
        scopes = ScopeClassifier()
        method = find_node(widget, 'method_definition')
        scopes.push(method)
        assert scopes.depth == 1
        assert scopes.pop().id == method.id
        assert scopes.depth == 0


class TestScopeChainPredicates:
    """Predicates over the current frame stack."""

    def test_constructor(self, widget, find_node, enter_frames):
        """A read in the constructor is in_constructor, not a lifecycle read."""
        scopes = ScopeClassifier()
        enter_frames(scopes, find_node(widget, 'member_expression', 'props.ready'))

        assert scopes.in_constructor()
        assert not scopes.in_lifecycle_method()

    def test_component_will_receive_props_through_nested_arrow(self, widget, find_node, enter_frames):
        """Predicates look through every enclosing frame, not just the innermost."""
        scopes = ScopeClassifier()
        enter_frames(scopes, find_node(widget, 'member_expression', 'nextProps.mode'))

        assert scopes.depth == 2
        assert scopes.in_component_will_receive_props()
        assert scopes.in_lifecycle_method()
        assert not scopes.in_constructor()

    def test_async_safe_lifecycle_gate(self, widget, find_node, enter_frames):
        """getDerivedStateFromProps counts only with the gate on."""
        access = find_node(widget, 'member_expression', 'props.seed')

        gated = ScopeClassifier(check_async_safe_lifecycles=False)
        enter_frames(gated, access)
        assert not gated.in_lifecycle_method()
        assert gated.in_lifecycle_method(include_async_safe=True)

        modern = ScopeClassifier(check_async_safe_lifecycles=True)
        enter_frames(modern, access)
        assert modern.in_lifecycle_method()

    def test_set_state_updater_and_callback(self, widget, find_node, enter_frames):
        """The first setState argument is the updater; the second is not."""
        scopes = ScopeClassifier()

        enter_frames(scopes, find_node(widget, 'member_expression', 'p.step'))
        assert scopes.in_set_state_updater()
        assert scopes.is_prop_argument_in_set_state_updater(find_node(widget, 'member_expression', 'p.step'))

        enter_frames(scopes, find_node(widget, 'member_expression', 'prevProps.step'))
        assert not scopes.in_set_state_updater(), "the completion callback is not an updater"
        assert scopes.in_lifecycle_method()

    def test_updater_with_one_parameter_has_no_props_argument(self, parse, find_node, enter_frames):
        """state => ... has no props parameter to read from."""
        root = parse("""
            class Toggle extends React.Component {
              flip() {
                this.setState(state => ({ on: !state.on }));
              }
              render() { return <button />; }
            }
        """).root_node
        access = find_node(root, 'member_expression', 'state.on')
        scopes = ScopeClassifier()
        enter_frames(scopes, access)

        assert scopes.in_set_state_updater()
        assert not scopes.is_prop_argument_in_set_state_updater(access)

    def test_render_is_not_lifecycle(self, widget, find_node, enter_frames):
        """render is neither a lifecycle frame nor a lifecycle holder."""
        scopes = ScopeClassifier(check_async_safe_lifecycles=True)
        access = find_node(widget, 'member_expression', 'this.props.label')
        enter_frames(scopes, access)

        assert not scopes.in_lifecycle_method()
        assert not scopes.is_in_lifecycle_method_node(access)


class TestNodeAncestorPredicates:
    """Predicates that walk syntax parents instead of frames."""

    def test_lifecycle_node_predicates(self, widget, find_node):
        """Lifecycle methods and constructors are lifecycle holders."""
        scopes = ScopeClassifier()

        assert scopes.is_in_lifecycle_method_node(find_node(widget, 'member_expression', 'nextProps.mode'))
        assert scopes.is_in_lifecycle_method_node(find_node(widget, 'member_expression', 'props.ready')), \
            "constructors count as lifecycle holders"
        assert not scopes.is_lifecycle_method_node(None)

    def test_es5_lifecycle_pair(self, parse, find_node):
        """ES5 lifecycle properties count like methods."""
        root = parse("""
            var Legacy = createReactClass({
              componentWillUpdate: function(nextProps) {
                log(nextProps.value);
              },
              render: function() { return <div />; }
            });
        """).root_node
        scopes = ScopeClassifier()

        assert scopes.is_in_lifecycle_method_node(find_node(root, 'member_expression', 'nextProps.value'))
