from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder

BUTTON_SOURCE = """
import React from 'react';
import styles from './Button.module.css';
import { Spinner } from '../Spinner/Spinner';
import type { BaseProps } from '../../types';

export type ButtonSize = 'sm' | 'md' | 'lg';

export interface ButtonProps extends React.ButtonHTMLAttributes<HTMLButtonElement>, BaseProps {
  /** Visual style of the button */
  variant?: 'primary' | 'secondary' | 'ghost';
  size?: ButtonSize;
  loading?: boolean;
  count?: number;
  label: string;
  icon?: React.ReactNode;
  items?: string[];
  onPress?: () => void;
  className?: string;
}

export const Button = React.forwardRef<HTMLButtonElement, ButtonProps>(
  ({ variant = 'primary', size = 'md', loading = false, count = 3, label, className, ...rest }, ref) => {
    return (
      <button ref={ref} className={styles.button} {...rest}>
        {loading ? <Spinner /> : label}
      </button>
    );
  }
);
"""

BUTTON_CSS = """
.button {
  padding: 8px 16px;
  color: var(--color-text);
  background-color: var(--color-primary, #0af);
  border-radius: 4px;
}

.button:hover {
  background-color: #0bf;
}

.primary {
  background-color: blue;
}

.sm {
  padding: 4px 8px;
}

@media (max-width: 600px) {
  .button {
    padding: 4px;
  }
}
"""

BUTTON_STORIES = """
import type { Meta, StoryObj } from '@storybook/react';
import { Button } from './Button';

const meta: Meta<typeof Button> = { component: Button };
export default meta;

type Story = StoryObj<typeof Button>;

export const Primary: Story = { args: { variant: 'primary', label: 'Go', count: 2, loading: false } };

export const Custom: Story = { render: () => <Button label="x" /> };
"""

SPINNER_SOURCE = """
type SpinnerProps = { size?: number; color?: string };

export function Spinner({ size = 16, color }: SpinnerProps) {
  return <span style={{ width: size, color }} />;
}
"""

TYPES_SOURCE = """
export interface BaseProps {
  testLabel?: string;
  onHover?: () => void;
  tone?: 'light' | 'dark';
}
"""

GLOBALS_CSS = """
:root {
  --color-primary: #0af;
  --color-text: #111;
  --space-2: 8px;
  --radius-md: 6px;
  --font-size-base: 16px;
  --duration-fast: 100ms;
}
"""

DARK_CSS = """
[data-theme='dark'] {
  --color-primary: #08c;
  --bg-surface: #222;
}
"""


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def component_library(repo_builder: RepoBuilder) -> RepoBuilder:
    """A small library with a styled Button, a Spinner, stories and theme files."""
    repo_builder.write(
        {
            "src/components/Button/Button.tsx": BUTTON_SOURCE,
            "src/components/Button/Button.module.css": BUTTON_CSS,
            "src/components/Button/Button.stories.tsx": BUTTON_STORIES,
            "src/components/Button/Button.test.tsx": "it('renders', () => {});\n",
            "src/components/Spinner/Spinner.tsx": SPINNER_SOURCE,
            "src/components/index.ts": "export * from './Button/Button';\n",
            "src/hooks/useToggle.tsx": "export function useToggle() { return null; }\n",
            "src/types.ts": TYPES_SOURCE,
            "src/styles/globals.css": GLOBALS_CSS,
            "src/styles/themes/dark.css": DARK_CSS,
        }
    )
    return repo_builder
